"""FastAPI application entrypoint."""

from dataclasses import dataclass
import logging
from pathlib import Path
import time
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from chat_proxy.config import Settings, load_environment_from_dotenv
from chat_proxy.logging_config import configure_logging
from chat_proxy.services.chat_dispatcher import ChatDispatcher
from chat_proxy.services.errors import (
    ChatProxyError,
    InvalidPayloadError,
    MissingPromptError,
    TransportError,
)
from chat_proxy.services.provider_selector import select_provider
from chat_proxy.services.status_reporter import StatusReporter, resolve_version


logger = logging.getLogger(__name__)
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

CHAT_PATH = "/api/ai/chat"
STATUS_PATH = "/api/ai/status"


class ChatRequest(BaseModel):
    prompt: str | None = None


class ChatResponse(BaseModel):
    answer: str


@dataclass(frozen=True)
class AppServices:
    settings: Settings
    chat_dispatcher: ChatDispatcher
    status_reporter: StatusReporter


def create_app() -> FastAPI:
    dotenv_loaded = load_environment_from_dotenv(".env")
    settings = Settings.from_env()
    configure_logging(settings.app_log_level)
    logger.info("application_startup_dotenv_loaded loaded=%s", dotenv_loaded)
    services = _build_services(settings)
    application = FastAPI(title="Chat Proxy")
    application.state.settings = settings
    _register_unexpected_error_middleware(application)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_exception_handlers(application)
    _register_routes(application, services)
    return application


def _build_services(settings: Settings) -> AppServices:
    return AppServices(
        settings=settings,
        chat_dispatcher=ChatDispatcher(settings=settings),
        status_reporter=StatusReporter(
            settings=settings,
            started_at=time.monotonic(),
            version=resolve_version(),
        ),
    )


def _register_unexpected_error_middleware(app: FastAPI) -> None:
    # Registered before CORSMiddleware so CORS headers still wrap this reply.
    @app.middleware("http")
    async def map_unexpected_errors(request: Request, call_next: Any) -> Any:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error("unhandled_request_error path=%s", request.url.path, exc_info=exc)
            return JSONResponse(status_code=500, content={"error": "server error"})


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ChatProxyError)
    async def handle_chat_proxy_error(request: Request, exc: ChatProxyError) -> JSONResponse:
        if isinstance(exc, TransportError):
            logger.error("chat_request_transport_failed path=%s detail=%s", request.url.path, exc)
        else:
            logger.info(
                "chat_request_failed path=%s status=%s error=%s",
                request.url.path,
                exc.status_code,
                exc.error_message,
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        error = _classify_validation_errors(request, exc.errors())
        logger.info(
            "chat_payload_validation_failed path=%s error=%s",
            request.url.path,
            error.error_message,
        )
        return JSONResponse(status_code=error.status_code, content=error.to_payload())


def _classify_validation_errors(request: Request, errors: Any) -> ChatProxyError:
    # Bodies sent without a JSON content type are ignored, as if no body was sent.
    if not _has_json_content_type(request):
        return MissingPromptError("missing prompt")
    if any(_is_prompt_field_error(error) for error in errors):
        return MissingPromptError("missing prompt")
    return InvalidPayloadError("invalid JSON body")


def _has_json_content_type(request: Request) -> bool:
    content_type = request.headers.get("content-type")
    if content_type is None or content_type.strip() == "":
        return True
    media_type = content_type.split(";", maxsplit=1)[0].strip().lower()
    subtype = media_type.rpartition("/")[2]
    return subtype == "json" or subtype.endswith("+json")


def _is_prompt_field_error(error: dict[str, Any]) -> bool:
    location = tuple(error["loc"])
    return len(location) > 0 and location[-1] == "prompt"


def _register_routes(app: FastAPI, services: AppServices) -> None:
    _register_chat_routes(app, services)
    _register_status_route(app, services)


def _register_chat_routes(app: FastAPI, services: AppServices) -> None:
    @app.post(CHAT_PATH)
    async def chat(payload: ChatRequest | None = None) -> ChatResponse:
        prompt = payload.prompt if payload is not None else None
        decision = select_provider(services.settings)
        logger.info(
            "chat_endpoint_called provider=%s prompt_length=%s",
            decision,
            len(prompt) if prompt is not None else 0,
        )
        answer = await services.chat_dispatcher.dispatch(prompt, decision)
        return ChatResponse(answer=answer)

    @app.get(CHAT_PATH, response_class=HTMLResponse)
    async def chat_usage(request: Request) -> HTMLResponse:
        provider = select_provider(services.settings)
        logger.info("chat_usage_page_requested provider=%s", provider)
        return templates.TemplateResponse(
            request=request,
            name="chat_usage.html",
            context={
                "provider": provider,
                "chat_path": CHAT_PATH,
                "port": services.settings.port,
            },
        )


def _register_status_route(app: FastAPI, services: AppServices) -> None:
    @app.get(STATUS_PATH)
    async def status() -> dict[str, Any]:
        return services.status_reporter.snapshot().to_payload()
