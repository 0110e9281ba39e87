"""
Webhook server implementation using FastAPI.

This module provides the server that authenticates incoming webhook
calls and hands them to the inscription pipeline.
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from ordhook.core.logging import get_logger, set_request_id, uvicorn_log_config
from ordhook.core.settings import Settings
from ordhook.exceptions import AuthError, SetupError
from ordhook.webhook.executor import CommandRunner
from ordhook.webhook.fetcher import FileFetcher
from ordhook.webhook.models import InscriptionRequest, WebhookResponse
from ordhook.webhook.pipeline import InscriptionPipeline, PipelineDispatcher
from ordhook.webhook.security import SignatureVerifier

logger = get_logger(__name__)


class WebhookServer:
    """Main webhook server implementation."""

    def __init__(
        self,
        settings: Settings,
        verifier: Optional[SignatureVerifier] = None,
        pipeline: Optional[InscriptionPipeline] = None
    ):
        """
        Initialize webhook server.

        Args:
            settings: Service settings
            verifier: Signature gate (built from settings if omitted)
            pipeline: Inscription pipeline (built from settings if omitted)
        """
        self.settings = settings
        self.verifier = verifier or SignatureVerifier.from_settings(settings.webhook)
        self.pipeline = pipeline or InscriptionPipeline(
            FileFetcher(settings.download),
            CommandRunner.from_settings(settings.wallet),
            settings.wallet
        )
        self.dispatcher = PipelineDispatcher(self.pipeline)
        self.app = self._create_app()

    @asynccontextmanager
    async def lifespan(self, app: FastAPI):
        """Manage server lifecycle."""
        logger.info("Starting webhook server")

        yield

        logger.info("Shutting down webhook server")
        await self.dispatcher.shutdown(self.settings.webhook.shutdown_grace_seconds)

    def _create_app(self) -> FastAPI:
        """Create FastAPI application."""
        app = FastAPI(
            title="ordhook",
            description="Signed webhook that inscribes files with the ord wallet",
            version="0.1.0",
            lifespan=self.lifespan
        )

        @app.middleware("http")
        async def add_request_id(request: Request, call_next):
            """Add request ID to context."""
            request_id = set_request_id(request.headers.get("X-Request-ID"))

            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response

        app.add_api_route(
            self.settings.webhook.path,
            self.handle_webhook,
            methods=["POST"],
            response_model=WebhookResponse,
            summary="Inscribe and send a file"
        )

        app.add_api_route(
            "/health",
            self.health_check,
            methods=["GET"],
            summary="Health check endpoint"
        )

        return app

    async def handle_webhook(self, request: Request) -> Response:
        """
        Handle incoming webhook request.

        The body is read raw so the signature is checked against the exact
        bytes that were signed. A 200 means the pipeline was dispatched,
        not that it succeeded.
        """
        raw_body = await request.body()

        try:
            self._authenticate(request, raw_body)
        except AuthError as e:
            logger.warning(f"Signature is invalid: {e}")
            return Response(status_code=401)

        logger.info("Signature is valid")

        try:
            self._dispatch(raw_body)
        except SetupError as e:
            logger.error(f"Error handling webhook: {e}", exc_info=True)
            return JSONResponse(status_code=500, content={"result": "Error"})

        return JSONResponse(status_code=200, content={"result": "OK"})

    def _authenticate(self, request: Request, raw_body: bytes) -> None:
        signature = request.headers.get(self.settings.webhook.signature_header)
        if signature is None:
            raise AuthError("missing signature header")
        if not self.verifier.verify(signature, raw_body):
            raise AuthError("signature mismatch")

    def _dispatch(self, raw_body: bytes) -> None:
        try:
            inscription = InscriptionRequest.model_validate_json(raw_body)
        except ValidationError as e:
            raise SetupError(f"Invalid webhook body: {e}") from e

        try:
            self.dispatcher.dispatch(inscription)
        except Exception as e:
            raise SetupError(f"Could not dispatch pipeline: {e}") from e

    async def health_check(self) -> Dict[str, Any]:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "active_pipelines": self.dispatcher.active_count()
        }

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """Run the webhook server."""
        host = host or self.settings.webhook.host
        port = port or self.settings.webhook.port

        logger.info(f"Starting webhook server on {host}:{port}")

        uvicorn.run(
            self.app,
            host=host,
            port=port,
            log_config=uvicorn_log_config(self.settings.logging)
        )


def create_webhook_server(settings: Settings) -> WebhookServer:
    """Create and configure webhook server."""
    return WebhookServer(settings)
