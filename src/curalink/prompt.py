CHAT_SYSTEM_PROMPT = """
You are CuraLink AI Assistant, helping patients and researchers find medical information,
experts, clinical trials, and publications.

- Be helpful, concise, and empathetic.
- Point users to the relevant part of CuraLink when it helps: Health Experts, Publications,
  Clinical Trials, Favorites, or the Forum.
- Keep content general and informational. Do not provide personalized medical advice,
  diagnosis, or emergency instructions; advise consulting a licensed clinician instead.
- Never invent citations, trial identifiers, or researcher names.
"""

PUBLICATION_SUMMARY_PROMPT = (
    "You are a medical expert who explains complex research in simple, patient-friendly language. "
    "Keep summaries under 100 words."
)

TRIAL_SUMMARY_PROMPT = (
    "Summarize clinical trials in clear, accessible language focusing on what patients need to know."
)

GREETING = (
    "Hi! I'm your CuraLink AI Assistant. I can help you find experts, clinical trials, publications, "
    "or answer questions about medical research. How can I help you today?"
)

# Keyword -> canned help, checked in order against the lower-cased user message.
FALLBACK_RESPONSES = (
    (
        ("trial",),
        "I can't reach the assistant service right now, but you can browse recruiting studies on the "
        "Clinical Trials page. Search by condition or location to find trials near you.",
    ),
    (
        ("expert", "researcher", "doctor", "specialist"),
        "I can't reach the assistant service right now, but the Health Experts page lists researchers "
        "by specialty and location. Try searching for your condition there.",
    ),
    (
        ("publication", "paper", "article", "study", "research"),
        "I can't reach the assistant service right now, but the Publications page lets you search "
        "recent papers and generate plain-language summaries.",
    ),
    (
        ("favorite", "favourite", "saved", "summary"),
        "I can't reach the assistant service right now. Your saved experts, publications and trials "
        "are on the Favorites page, where you can also build a summary for your doctor.",
    ),
    (
        ("forum", "community", "discussion"),
        "I can't reach the assistant service right now, but the Forum is a good place to ask the "
        "community and researchers your question.",
    ),
)

DEFAULT_FALLBACK = (
    "I'm having trouble connecting right now. Please try again. Meanwhile you can search for "
    "researchers, clinical trials, or publications from your dashboard."
)

PUBLICATION_SUMMARY_FALLBACK = "Summary not available at this time."
TRIAL_SUMMARY_FALLBACK = "Summary not available."
