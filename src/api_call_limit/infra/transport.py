from __future__ import annotations

import logging

import httpx

from ..config.urls import DOCUMENT_CREATE_URL
from ..core.ports.transport_port import TransportPort
from .http_client import HttpClient

logger = logging.getLogger(__name__)

CONTENT_TYPE = "text/plain;charset=UTF-8"
ACCEPT = "application/json"


def auth_headers(credentials: str) -> dict[str, str]:
	return {
		"Content-Type": CONTENT_TYPE,
		"Accept": ACCEPT,
		"Authorization": f"Bearer {credentials}",
	}


class DocumentTransport(TransportPort):
	"""Sends serialized documents to the document creation endpoint."""

	def __init__(self, http_client: HttpClient, url: str = DOCUMENT_CREATE_URL, *, owns_client: bool = False) -> None:
		self._http = http_client
		self._url = url
		self._owns_client = owns_client

	@property
	def url(self) -> str:
		return self._url

	def send(self, body: str, credentials: str) -> httpx.Response:
		logger.debug(f"API request: {body}")
		resp = self._http.post_text(self._url, body, headers=auth_headers(credentials))
		logger.debug(f"API response: {resp.status_code}")
		return resp

	def close(self) -> None:
		if self._owns_client:
			self._http.close()
