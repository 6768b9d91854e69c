"""Thin typed client over the Azure DevOps Git REST API.

Only the read-only surface the review pipeline needs is wrapped:
repositories, pull requests, iterations, iteration changes and file blobs.
Every call authenticates with HTTP basic auth over a personal
access token and pins ``api-version``.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import requests

from adolens_core.ado.models import ChangeEntry, PullRequest, Repository
from adolens_core.config import require_setting
from adolens_core.errors import ContentNotFoundError, DecodeError, GatewayError

logger = logging.getLogger(__name__)

_DEFAULT_API_VERSION = "7.0"
_DEFAULT_TIMEOUT = 30
_PR_PAGE_SIZE = 100


class AzureDevOpsClient:
    def __init__(
        self,
        organization: str,
        project: str,
        token: str,
        api_version: str = _DEFAULT_API_VERSION,
        timeout: float = _DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        # Validated eagerly: a missing PAT must fail here, not as a 401 on
        # the first page load.
        settings = {"organization": organization, "project": project, "azure_devops_pat": token}
        require_setting(settings, "organization")
        require_setting(settings, "project")
        require_setting(settings, "azure_devops_pat")

        self.base_url = f"https://dev.azure.com/{quote(organization, safe='')}/{quote(project, safe='')}/_apis"
        self.api_version = api_version
        self.timeout = timeout
        self.session = session or requests.Session()
        # PATs go in the password slot of basic auth with an empty user name.
        self.session.auth = ("", token)
        self.session.headers.update(
            {
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
        )

    @classmethod
    def from_config(cls, config: dict, session: requests.Session | None = None) -> AzureDevOpsClient:
        return cls(
            organization=require_setting(config, "organization"),
            project=require_setting(config, "project"),
            token=require_setting(config, "azure_devops_pat"),
            api_version=config.get("api_version", _DEFAULT_API_VERSION),
            timeout=config.get("request_timeout", _DEFAULT_TIMEOUT),
            session=session,
        )

    # ------------------------------------------------------------------ #
    # Transport                                                            #
    # ------------------------------------------------------------------ #

    def _get(self, endpoint: str, params: dict | None = None, accept: str | None = None) -> requests.Response:
        query = {"api-version": self.api_version, **(params or {})}
        headers = {"Accept": accept} if accept else None
        url = f"{self.base_url}{endpoint}"
        logger.debug("GET %s %s", url, query)
        try:
            response = self.session.get(url, params=query, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise GatewayError(f"Azure DevOps request failed: {e}") from e
        if not response.ok:
            raise GatewayError(
                f"Azure DevOps API error: {response.status_code} {response.reason}",
                status_code=response.status_code,
            )
        return response

    def _get_json(self, endpoint: str, params: dict | None = None) -> dict:
        response = self._get(endpoint, params)
        try:
            data = response.json()
        except ValueError as e:
            raise DecodeError(f"Azure DevOps returned a non-JSON body for {endpoint}") from e
        if not isinstance(data, dict):
            raise DecodeError(f"Azure DevOps returned an unexpected payload for {endpoint}")
        return data

    # ------------------------------------------------------------------ #
    # Repositories                                                         #
    # ------------------------------------------------------------------ #

    def list_repositories(self) -> list[Repository]:
        try:
            data = self._get_json("/git/repositories")
            return [Repository.from_api(r) for r in data.get("value") or []]
        except GatewayError as e:
            logger.error("Failed to fetch repositories: %s", e)
            raise

    def get_repository_by_name(self, name: str) -> Repository | None:
        try:
            repos = self.list_repositories()
        except GatewayError:
            return None
        return next((r for r in repos if r.name == name), None)

    # ------------------------------------------------------------------ #
    # Pull requests                                                        #
    # ------------------------------------------------------------------ #

    def list_pull_requests(self, repo_id: str) -> list[PullRequest]:
        params = {"searchCriteria.status": "active", "$top": str(_PR_PAGE_SIZE)}
        try:
            data = self._get_json(f"/git/repositories/{repo_id}/pullrequests", params)
            return [PullRequest.from_api(pr) for pr in data.get("value") or []]
        except GatewayError as e:
            logger.error("Failed to fetch pull requests for %s: %s", repo_id, e)
            raise

    def get_pull_request(self, repo_id: str, pr_id: int | str) -> PullRequest | None:
        """Return the pull request, or None when it could not be fetched.

        None covers both "does not exist" and transient failures; callers
        abort any work that depends on the PR's branches.
        """
        try:
            return PullRequest.from_api(self._get_json(f"/git/repositories/{repo_id}/pullrequests/{pr_id}"))
        except GatewayError as e:
            logger.error("Failed to fetch pull request %s: %s", pr_id, e)
            return None

    def _list_iterations(self, repo_id: str, pr_id: int | str) -> list[dict]:
        data = self._get_json(f"/git/repositories/{repo_id}/pullrequests/{pr_id}/iterations")
        return [it for it in data.get("value") or [] if isinstance(it, dict)]

    def get_latest_iteration(self, repo_id: str, pr_id: int | str) -> dict | None:
        try:
            iterations = self._list_iterations(repo_id, pr_id)
            if not iterations:
                return None
            latest_id = iterations[-1].get("id")
            return self._get_json(f"/git/repositories/{repo_id}/pullrequests/{pr_id}/iterations/{latest_id}")
        except GatewayError as e:
            logger.error("Failed to fetch latest iteration for PR %s: %s", pr_id, e)
            return None

    def list_changed_files(self, repo_id: str, pr_id: int | str) -> list[ChangeEntry]:
        """Return the change entries of the PR's most recent iteration.

        The iterations endpoint lists iterations in ascending order, so the
        last element is the current state of the PR.
        """
        try:
            iterations = self._list_iterations(repo_id, pr_id)
            if not iterations:
                return []
            latest_id = iterations[-1].get("id")
            data = self._get_json(f"/git/repositories/{repo_id}/pullrequests/{pr_id}/iterations/{latest_id}/changes")
            return [ChangeEntry.from_api(c) for c in data.get("changeEntries") or []]
        except GatewayError as e:
            logger.error("Failed to fetch changed files for PR %s: %s", pr_id, e)
            raise

    # ------------------------------------------------------------------ #
    # File content                                                         #
    # ------------------------------------------------------------------ #

    def _fetch_blob(self, repo_id: str, params: dict) -> str:
        try:
            return self._get(f"/git/repositories/{repo_id}/items", params, accept="text/plain").text
        except GatewayError as e:
            if e.status_code == 404:
                raise ContentNotFoundError(f"{params['path']} not found", status_code=404) from e
            raise

    def get_file_content(
        self,
        repo_id: str,
        path: str,
        version: str | None = None,
        version_type: str = "commit",
    ) -> str:
        """Return the text of ``path`` at a branch or commit, or "" if unavailable.

        Never raises for a missing file or a transport failure: an absent
        side is the normal case for added and deleted files.
        """
        params = {"path": path}
        if version:
            params["versionDescriptor.versionType"] = version_type
            params["versionDescriptor.version"] = version
        try:
            return self._fetch_blob(repo_id, params)
        except ContentNotFoundError:
            logger.debug("%s does not exist at %s %s", path, version_type, version)
            return ""
        except GatewayError as e:
            logger.warning("Failed to fetch content for %s at %s %s: %s", path, version_type, version, e)
            return ""
