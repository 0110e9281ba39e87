"""
Webhook system for signed inscription requests.

This module provides the webhook endpoint that verifies a request's
signature, downloads the referenced file and drives the ord wallet.
"""

from .server import WebhookServer, create_webhook_server
from .security import SignatureVerifier, compute_signature, verify_signature
from .fetcher import FileFetcher
from .executor import CommandRunner, CommandResult
from .pipeline import InscriptionPipeline, PipelineDispatcher
from .models import InscriptionRequest

__all__ = [
    'WebhookServer',
    'create_webhook_server',
    'SignatureVerifier',
    'compute_signature',
    'verify_signature',
    'FileFetcher',
    'CommandRunner',
    'CommandResult',
    'InscriptionPipeline',
    'PipelineDispatcher',
    'InscriptionRequest',
]
