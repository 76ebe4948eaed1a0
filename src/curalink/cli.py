"""Command-line front end for CuraLink.

Each subcommand plays the part of one page or dialog: onboarding, profile,
search, researcher profile, requests to a researcher, favorites, forum and the
assistant chat. User data lives in ``--data-dir`` (``CURALINK_DATA_DIR``):
``preferences.json`` survives between runs, ``session.json`` holds the chat
history and both are wiped by ``logout``.

Example
-------
    curalink onboard patient --name "John Smith" --disease "Parkinson's disease" --location Toronto
    curalink search parkinson
    curalink favorite trials NCT05123456
    curalink favorites --summary summary.txt --select NCT05123456
    curalink chat "Tell me about clinical trials"
    curalink meet 1 --date 2030-05-01 --time 14:00 --duration 45
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from . import config, search_service
from .assistant import AssistantClient, ChatSession
from .events import EventNotifier, get_user_id
from .favorites import FavoritesManager
from .forum import AVAILABLE_CATEGORIES, Forum
from .interactions import (
    DEFAULT_MEETING_DURATION,
    MEETING_DURATIONS,
    Interactions,
    InvalidRequestError,
    ResearcherNotFoundError,
)
from .profiles import (
    AccountRequiredError,
    IncompleteFormError,
    get_account_type,
    load_profile,
    logout,
    onboard,
    require_account,
    update_profile,
)
from .report import DEFAULT_REPORT_NAME, build_summary_report
from .schemas import FAVORITE_CATEGORIES, PatientProfile
from .storage import JsonFileStore

LOGGER = logging.getLogger("curalink.cli")


class Context:
    def __init__(self, data_dir: Path, assistant: AssistantClient | None = None):
        self.preferences = JsonFileStore(data_dir / config.PREFERENCES_FILE)
        self.session = JsonFileStore(data_dir / config.SESSION_FILE)
        self.favorites = FavoritesManager(self.preferences)
        self.forum = Forum(self.preferences)
        self.interactions = Interactions(self.preferences)
        self.assistant = assistant or AssistantClient()
        self._notifier = None

    @property
    def notifier(self) -> EventNotifier:
        if self._notifier is None:
            self._notifier = EventNotifier(user_id=get_user_id(self.preferences))
        return self._notifier


# ----------------------------------------------------------------------
# Rendering
# ----------------------------------------------------------------------


def _star(favorite: bool) -> str:
    return "*" if favorite else " "


def print_researchers(researchers, favorites=None):
    for r in researchers:
        mark = _star(favorites is not None and r.id in favorites.researchers)
        score = f" ({r.match_score}% match)" if r.match_score is not None else ""
        print(f"[{mark}] {r.id}: {r.name}{score}")
        print(f"      {r.institution} | {r.specialty} | {r.location}")
        if r.research_interests:
            print(f"      Interests: {', '.join(r.research_interests)}")


def print_publications(publications, favorites=None):
    for p in publications:
        mark = _star(favorites is not None and p.id in favorites.publications)
        print(f"[{mark}] {p.id}: {p.title}")
        print(f"      {p.authors} | {p.journal}, {p.date}")


def print_trials(trials, favorites=None):
    for t in trials:
        mark = _star(favorites is not None and t.id in favorites.trials)
        print(f"[{mark}] {t.id}: {t.title}")
        print(f"      {t.status} | {t.phase} | {t.condition} | {t.location}")


# ----------------------------------------------------------------------
# Commands
# ----------------------------------------------------------------------

PATIENT_FIELDS = ("name", "disease", "location", "additional_info")
RESEARCHER_FIELDS = ("name", "institution", "specialties", "research_interests", "location", "orcid")


def _form_data(args, fields):
    return {name: getattr(args, name) for name in fields if getattr(args, name, None) is not None}


async def cmd_onboard(args, ctx: Context) -> int:
    fields = PATIENT_FIELDS if args.account_type == "patient" else RESEARCHER_FIELDS
    previous = get_account_type(ctx.preferences)
    profile = onboard(ctx.preferences, args.account_type, _form_data(args, fields))
    await ctx.notifier.user_signup({"userType": args.account_type, **profile.model_dump(by_alias=True)})
    if previous and previous != args.account_type:
        await ctx.notifier.account_type_changed(previous, args.account_type)
    print(f"Welcome to CuraLink, {profile.name}!")
    return 0


async def cmd_profile(args, ctx: Context) -> int:
    account_type = require_account(ctx.preferences)
    fields = PATIENT_FIELDS if account_type == "patient" else RESEARCHER_FIELDS
    changes = _form_data(args, fields)
    profile = update_profile(ctx.preferences, changes) if changes else load_profile(ctx.preferences)
    if changes:
        print("Profile updated.")
    print(f"Account: {account_type}")
    if profile is None:
        print("  No profile saved yet.")
        return 0
    for name, value in profile.model_dump().items():
        print(f"  {name}: {value}")
    return 0


async def cmd_search(args, ctx: Context) -> int:
    require_account(ctx.preferences)
    profile = load_profile(ctx.preferences)
    disease = profile.disease if isinstance(profile, PatientProfile) else None
    location = profile.location if profile else None
    query = " ".join(args.query)

    researchers, publications, trials = await asyncio.gather(
        search_service.search_researchers(query, disease, location),
        search_service.search_publications(query, disease),
        search_service.search_clinical_trials(query, location),
    )
    favorites = ctx.favorites.get_favorites()

    print(f"Health Experts ({len(researchers)})")
    print_researchers(researchers, favorites)
    print(f"\nPublications ({len(publications)})")
    print_publications(publications, favorites)
    print(f"\nClinical Trials ({len(trials)})")
    print_trials(trials, favorites)

    total = len(researchers) + len(publications) + len(trials)
    await ctx.notifier.search_performed("all", query, total)
    return 0


async def cmd_researcher(args, ctx: Context) -> int:
    researcher = search_service.get_researcher(args.id)
    if researcher is None:
        print(f"Researcher {args.id} not found.")
        return 1
    print_researchers([researcher], ctx.favorites.get_favorites())
    if researcher.publications is not None:
        print(f"      Publications: {researcher.publications}")
    return 0


ENTITY_LOOKUPS = {
    "researchers": search_service.get_researcher,
    "publications": search_service.get_publication,
    "trials": search_service.get_trial,
}


async def cmd_favorite(args, ctx: Context) -> int:
    entity = ENTITY_LOOKUPS[args.category](args.id)
    favorites = ctx.favorites.toggle_favorite(args.category, args.id)
    added = args.id in favorites.ids(args.category)
    print(f"{'Added' if added else 'Removed'} {args.id} {'to' if added else 'from'} {args.category}.")
    if added and entity is not None:
        if args.category == "researchers":
            await ctx.notifier.expert_followed(entity.id, entity.name)
        elif args.category == "publications":
            await ctx.notifier.publication_saved(entity.id, entity.title)
        else:
            await ctx.notifier.trial_favorited(entity.id, entity.title)
    return 0


async def cmd_favorites(args, ctx: Context) -> int:
    require_account(ctx.preferences)
    entities = await ctx.favorites.load_favorite_entities()
    researchers, publications, trials = (entities[c] for c in FAVORITE_CATEGORIES)

    print(f"Potential Collaborations ({len(researchers)})")
    print_researchers(researchers)
    print(f"\nReading List ({len(publications)})")
    print_publications(publications)
    print(f"\nInteresting Trials ({len(trials)})")
    print_trials(trials)

    if args.summary:
        selected = set(args.select or [])
        report = build_summary_report(
            [r for r in researchers if not selected or r.id in selected],
            [p for p in publications if not selected or p.id in selected],
            [t for t in trials if not selected or t.id in selected],
        )
        Path(args.summary).write_text(report, encoding="utf-8")
        print(f"\nSummary written to {args.summary}. Share this with your doctor!")
    return 0


async def cmd_summarize(args, ctx: Context) -> int:
    entity = ENTITY_LOOKUPS[args.category](args.id)
    if entity is None:
        print(f"No {args.category} entry with id {args.id}.")
        return 1
    if args.category == "publications":
        reply = await ctx.assistant.summarize_publication(entity.abstract or entity.title)
    else:
        reply = await ctx.assistant.summarize_trial(entity.description)
    print(reply.text)
    return 0


async def cmd_chat(args, ctx: Context) -> int:
    session = ChatSession(ctx.assistant, ctx.session)
    if args.reset:
        session.reset()
        print("Chat history cleared.")
        return 0
    message = " ".join(args.message)
    if not message.strip():
        for msg in session.history:
            print(f"{msg.role}: {msg.content}")
        return 0

    reply = await session.send(message)
    print(reply.text)
    if reply.degraded:
        LOGGER.info("Assistant answered from fallback (%s)", reply.reason)
    await ctx.notifier.ai_chat_message(message, reply.text)
    return 0


async def cmd_forum(args, ctx: Context) -> int:
    if args.forum_command == "post":
        post = ctx.forum.create_post(args.title or "", args.category or "", args.content or "", args.tags or "")
        await ctx.notifier.forum_post_created(post.id, post.title, post.category)
        print(f"Post {post.id} published to the forum.")
        return 0

    posts = ctx.forum.list_posts(args.query or "", args.category or "all")
    for post in posts:
        print(f"{post.id}: {post.title} [{post.category}]")
        print(f"      by {post.author} ({post.author_type}) on {post.date}, {post.replies} replies")
    if not posts:
        print("No posts match.")
    return 0


async def cmd_meet(args, ctx: Context) -> int:
    require_account(ctx.preferences)
    request = ctx.interactions.request_meeting(args.id, args.date, args.time, args.duration, args.message or "")
    await ctx.notifier.meeting_requested(request.researcher_id, request.researcher_name, request.details)
    print(f"Meeting request sent to {request.researcher_name}. You'll receive a confirmation email.")
    return 0


async def cmd_message(args, ctx: Context) -> int:
    require_account(ctx.preferences)
    request = ctx.interactions.send_message(args.id, args.subject, args.message)
    print(f"Your message has been sent to {request.researcher_name}.")
    return 0


async def cmd_collaborate(args, ctx: Context) -> int:
    require_account(ctx.preferences)
    request = ctx.interactions.request_collaboration(
        args.id, args.project_title, args.description, args.expertise or ""
    )
    print(
        f"Your collaboration request has been sent to {request.researcher_name}. "
        "They will review and respond soon."
    )
    return 0


async def cmd_nudge(args, ctx: Context) -> int:
    require_account(ctx.preferences)
    request = ctx.interactions.send_nudge(args.id, args.message or "")
    print(f"Your invitation to join CuraLink has been sent to {request.researcher_name}.")
    return 0


async def cmd_logout(args, ctx: Context) -> int:
    logout(ctx.preferences, ctx.session)
    print("Logged out. Local data cleared.")
    return 0


# ----------------------------------------------------------------------
# Entry point
# ----------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="curalink", description="CuraLink CLI")
    parser.add_argument("--data-dir", type=Path, default=config.DATA_DIR, help="Directory holding local data")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    sub = parser.add_subparsers(dest="command", required=True)

    onboard_parser = sub.add_parser("onboard", help="Create a patient or researcher account")
    onboard_sub = onboard_parser.add_subparsers(dest="account_type", required=True)
    patient = onboard_sub.add_parser("patient", help="Patient onboarding")
    researcher = onboard_sub.add_parser("researcher", help="Researcher onboarding")

    profile = sub.add_parser("profile", help="Show or edit your profile")

    for form in (patient, profile):
        form.add_argument("--disease", help="Disease or condition of interest")
        form.add_argument("--additional-info", dest="additional_info", help="Anything else to share")
    for form in (researcher, profile):
        form.add_argument("--institution")
        form.add_argument("--specialties")
        form.add_argument("--research-interests", dest="research_interests")
        form.add_argument("--orcid")
    for form in (patient, researcher, profile):
        form.add_argument("--name")
        form.add_argument("--location")

    search = sub.add_parser("search", help="Search experts, publications and clinical trials")
    search.add_argument("query", nargs="*", help="Search terms; empty lists everything")

    view = sub.add_parser("researcher", help="Show a researcher profile")
    view.add_argument("id")

    favorite = sub.add_parser("favorite", help="Toggle a favorite")
    favorite.add_argument("category", choices=FAVORITE_CATEGORIES)
    favorite.add_argument("id")

    favorites = sub.add_parser("favorites", help="List favorites")
    favorites.add_argument(
        "--summary", nargs="?", const=DEFAULT_REPORT_NAME, help="Write a summary for your doctor to this file"
    )
    favorites.add_argument("--select", nargs="+", help="Only include these ids in the summary")

    summarize = sub.add_parser("summarize", help="Plain-language summary of a publication or trial")
    summarize.add_argument("category", choices=("publications", "trials"))
    summarize.add_argument("id")

    chat = sub.add_parser("chat", help="Talk to the AI assistant")
    chat.add_argument("message", nargs="*", help="Message; omit to show the conversation")
    chat.add_argument("--reset", action="store_true", help="Clear the conversation")

    forum = sub.add_parser("forum", help="Community forum")
    forum_sub = forum.add_subparsers(dest="forum_command", required=True)
    forum_list = forum_sub.add_parser("list", help="List posts")
    forum_list.add_argument("--query")
    forum_list.add_argument("--category")
    forum_post = forum_sub.add_parser("post", help="Create a post")
    forum_post.add_argument("--title")
    forum_post.add_argument("--category", help=f"One of: {', '.join(AVAILABLE_CATEGORIES)}")
    forum_post.add_argument("--content")
    forum_post.add_argument("--tags")

    meet = sub.add_parser("meet", help="Request a meeting with a researcher")
    meet.add_argument("id")
    meet.add_argument("--date", help="Meeting date, YYYY-MM-DD, today or later")
    meet.add_argument("--time", help="Meeting time, HH:MM")
    meet.add_argument(
        "--duration", type=int, choices=MEETING_DURATIONS, default=DEFAULT_MEETING_DURATION, help="Minutes"
    )
    meet.add_argument("--message", help="Optional note for the researcher")

    message = sub.add_parser("message", help="Send a message to a researcher")
    message.add_argument("id")
    message.add_argument("--subject")
    message.add_argument("--message")

    collaborate = sub.add_parser("collaborate", help="Propose a collaboration to a researcher")
    collaborate.add_argument("id")
    collaborate.add_argument("--project-title", dest="project_title")
    collaborate.add_argument("--description")
    collaborate.add_argument("--expertise", help="Expertise you are looking for")

    nudge = sub.add_parser("nudge", help="Invite a researcher to join CuraLink")
    nudge.add_argument("id")
    nudge.add_argument("--message", help="Optional personal note")

    sub.add_parser("logout", help="Clear all local data")
    return parser


COMMANDS = {
    "onboard": cmd_onboard,
    "profile": cmd_profile,
    "search": cmd_search,
    "researcher": cmd_researcher,
    "favorite": cmd_favorite,
    "favorites": cmd_favorites,
    "summarize": cmd_summarize,
    "chat": cmd_chat,
    "forum": cmd_forum,
    "meet": cmd_meet,
    "message": cmd_message,
    "collaborate": cmd_collaborate,
    "nudge": cmd_nudge,
    "logout": cmd_logout,
}


def main(argv=None, assistant: AssistantClient | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(message)s",
    )
    ctx = Context(args.data_dir, assistant=assistant)
    try:
        return asyncio.run(COMMANDS[args.command](args, ctx))
    except IncompleteFormError as exc:
        print(f"Missing information: {exc}", file=sys.stderr)
        return 2
    except AccountRequiredError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    except InvalidRequestError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    except ResearcherNotFoundError as exc:
        print(str(exc))
        return 1


if __name__ == "__main__":
    sys.exit(main())
