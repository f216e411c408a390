from __future__ import annotations

import logging
from typing import Protocol

import httpx

logger = logging.getLogger(__name__)

GRAPHQL_URL = "https://www.change.org/api-proxy/graphql?op=PetitionDetailsPageStats"
_OPERATION_NAME = "PetitionDetailsPageStats"
_QUERY = (
    "query PetitionDetailsPageStats($petitionSlugOrId: String!) { "
    "petitionStats: petitionBySlugOrId(slugOrId: $petitionSlugOrId) "
    "{signatureState {signatureCount { displayed } signatureGoal { displayed } } }}"
)
_HEADERS = {
    "content-type": "application/json",
    "x-requested-with": "http-link",
}


class PetitionFetchError(Exception):
    """Raised when the petition stats cannot be fetched or decoded."""


class MetricsFetcher(Protocol):
    def fetch(self, petition_name: str) -> tuple[int, int]: ...


def build_payload(petition_name: str) -> list[dict]:
    return [
        {
            "operationName": _OPERATION_NAME,
            "variables": {"petitionSlugOrId": petition_name},
            "query": _QUERY,
        }
    ]


def parse_stats(payload: object) -> tuple[int, int]:
    """Extract (signature count, signature goal) from the GraphQL response body."""
    if not isinstance(payload, list) or len(payload) != 1:
        raise PetitionFetchError(f"unexpected result length: {payload!r}")
    try:
        state = payload[0]["data"]["petitionStats"]["signatureState"]
        return int(state["signatureCount"]["displayed"]), int(state["signatureGoal"]["displayed"])
    except (KeyError, TypeError, ValueError) as e:
        raise PetitionFetchError(f"unexpected result shape: {payload!r}") from e


class ChangeOrgFetcher:
    def __init__(self, client: httpx.Client | None = None, timeout: float = 30.0) -> None:
        self._client = client
        self.timeout = timeout

    def fetch(self, petition_name: str) -> tuple[int, int]:
        logger.info("Fetching stats for petition %s", petition_name)
        try:
            if self._client is not None:
                response = self._post(self._client, petition_name)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = self._post(client, petition_name)
        except httpx.HTTPError as e:
            raise PetitionFetchError(f"calling API: {e}") from e

        if response.status_code != httpx.codes.OK:
            raise PetitionFetchError(
                f"unexpected status code: {response.status_code}, {response.text}"
            )
        try:
            payload = response.json()
        except ValueError as e:
            raise PetitionFetchError(f"decoding body: {response.text}") from e

        signature, goal = parse_stats(payload)
        logger.info("Petition %s: %d signatures, goal %d", petition_name, signature, goal)
        return signature, goal

    @staticmethod
    def _post(client: httpx.Client, petition_name: str) -> httpx.Response:
        return client.post(GRAPHQL_URL, json=build_payload(petition_name), headers=_HEADERS)
