import logging
import time
import uuid
from typing import Literal

from fastapi import FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from google import genai
from google.auth import exceptions as google_auth_exceptions

from .. import config

LOGGER = logging.getLogger("curalink.api")

llm_client = None


def get_llm_client():
    global llm_client
    if llm_client is None:
        if config.GOOGLE_API_KEY:
            llm_client = genai.Client(api_key=config.GOOGLE_API_KEY)
        else:
            llm_client = genai.Client(vertexai=True, project=config.GCP_PROJECT, location=config.GCP_LOCATION)
    return llm_client


app = FastAPI(
    title="CuraLink · Assistant Proxy",
    description="Thin proxy that keeps the model credential server-side and speaks the chat-completion shape.",
    root_path=config.ROOT_PATH.rstrip("/"),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.API_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class Message(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ChatCompletionRequest(BaseModel):
    model: str | None = None
    messages: list[Message] = Field(min_length=1)
    max_tokens: int | None = Field(default=None, gt=0)
    temperature: float = 0.4


class ResponseMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: str


class Choice(BaseModel):
    index: int = 0
    message: ResponseMessage
    finish_reason: str = "stop"


class ChatCompletionResponse(BaseModel):
    id: str
    object: Literal["chat.completion"] = "chat.completion"
    created: int
    model: str
    choices: list[Choice]


def _check_token(authorization: str | None) -> None:
    if not config.PROXY_TOKEN:
        return
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or token != config.PROXY_TOKEN:
        raise HTTPException(status_code=401, detail="Invalid or missing bearer token.")


def _build_contents(messages: list[Message]) -> tuple[str, list[dict]]:
    """Split chat messages into a Gemini system instruction and user/model contents."""
    system_parts = [m.content for m in messages if m.role == "system"]
    contents = [
        {"role": "model" if m.role == "assistant" else "user", "parts": [{"text": m.content}]}
        for m in messages
        if m.role != "system"
    ]
    return "\n\n".join(system_parts), contents


# Routes
@app.get("/")
async def get_index():
    return {"message": "Welcome to the CuraLink assistant proxy!"}


@app.get("/healthz")
def health_check():
    return {"status": "ok"}


@app.post("/v1/chat/completions", response_model=ChatCompletionResponse)
def chat_completions(
    payload: ChatCompletionRequest, authorization: str | None = Header(default=None)
) -> ChatCompletionResponse:
    """Forward a chat-completion request to Gemini using the server-held credential."""
    _check_token(authorization)

    system_instruction, contents = _build_contents(payload.messages)
    if not contents:
        raise HTTPException(status_code=422, detail="At least one user or assistant message is required.")

    generation_config = {"temperature": payload.temperature}
    if system_instruction:
        generation_config["system_instruction"] = system_instruction
    if payload.max_tokens:
        generation_config["max_output_tokens"] = payload.max_tokens

    try:
        response = get_llm_client().models.generate_content(
            model=config.GEMINI_MODEL,
            contents=contents,
            config=generation_config,
        )
    except google_auth_exceptions.DefaultCredentialsError as exc:
        raise HTTPException(
            status_code=500,
            detail="Google credentials not found. Configure GOOGLE_API_KEY or application default credentials.",
        ) from exc
    except Exception as exc:
        LOGGER.exception("Upstream generation failed")
        raise HTTPException(status_code=502, detail=f"Upstream model error: {exc}") from exc

    text = response.text
    if not text:
        raise HTTPException(status_code=502, detail="Upstream model returned an empty response.")

    return ChatCompletionResponse(
        id=f"chatcmpl-{uuid.uuid4().hex}",
        created=int(time.time()),
        model=config.GEMINI_MODEL,
        choices=[Choice(message=ResponseMessage(content=text))],
    )
