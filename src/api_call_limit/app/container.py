from __future__ import annotations

import logging

import httpx
from dependency_injector import containers, providers

from ..core.usecases.create_document import CreateDocumentUseCase
from ..core.usecases.submit_documents import SubmitDocumentsUseCase
from ..infra.http_client import HttpClient
from ..infra.json_serializer import JsonDocumentSerializer
from ..infra.transport import DocumentTransport
from ..config.settings import AppConfig
from .dispatcher import Dispatcher

logger = logging.getLogger(__name__)


def http_client_resource(timeout_seconds, transport: httpx.BaseTransport | None = None):
	logger.info(f"Initializing HTTP client (timeout: {timeout_seconds}s)")
	with HttpClient(timeout_seconds=timeout_seconds, transport=transport) as client:
		yield client
	logger.debug("HTTP client closed")


def dispatcher_resource(window_seconds, request_limit, acquire_timeout_seconds, transport, serializer):
	"""Dispatcher owned by the container: its timer stops on shutdown_resources()."""
	logger.info(f"Initializing dispatcher: {request_limit} requests per {window_seconds}s")
	with Dispatcher(
		window_seconds,
		request_limit,
		transport=transport,
		serializer=serializer,
		acquire_timeout=acquire_timeout_seconds,
	) as dispatcher:
		yield dispatcher


class Container(containers.DeclarativeContainer):
	config = providers.Configuration(pydantic_settings=[AppConfig()])

	# Replaced with an httpx.MockTransport for dry runs and tests
	http_transport = providers.Object(None)

	http_client = providers.Resource(
		http_client_resource,
		timeout_seconds=config.timeout_seconds,
		transport=http_transport,
	)

	transport = providers.Factory(DocumentTransport, http_client=http_client, url=config.api_url)

	serializer = providers.Singleton(JsonDocumentSerializer)

	dispatcher = providers.Resource(
		dispatcher_resource,
		window_seconds=config.window_seconds,
		request_limit=config.request_limit,
		acquire_timeout_seconds=config.acquire_timeout_seconds,
		transport=transport,
		serializer=serializer,
	)

	create_uc = providers.Factory(CreateDocumentUseCase, dispatcher=dispatcher, default_token=config.auth_token)
	submit_uc = providers.Factory(
		SubmitDocumentsUseCase,
		dispatcher=dispatcher,
		default_token=config.auth_token,
		max_workers=config.max_workers,
	)
