"""
Authenticated session on the Freebox API.

Pairing (app token) happens once, after a human accepts the request on the
Freebox front panel. Every process start then logs in with a challenge/response:
password = HMAC-SHA1(app_token, challenge). The resulting session token is
attached to every request and transparently refreshed when the Freebox answers
auth_required / invalid_token.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import socket
import threading
import time
from typing import Any, Callable, Optional

import requests

from freebox_client import AUTH_HEADER, ApiClient, FreeboxApi
from freebox_client_exceptions import (
    AuthenticationException,
    AuthorizationException,
    FreeboxApiException,
    FreeboxException,
)
from freebox_models import AppIdentity, SessionInfo

APP_ID = "freebox_prometheus_exporter"
APP_NAME = "Freebox Prometheus Exporter"
APP_VERSION = "0.1.0"

AUTHORIZATION_POLL_INTERVAL = 10
MIN_REFRESH_INTERVAL = 5.0

logger = logging.getLogger(__name__)


def default_identity() -> AppIdentity:
    return AppIdentity(
        app_id=APP_ID,
        app_name=APP_NAME,
        app_version=APP_VERSION,
        device_name=socket.gethostname(),
    )


def compute_password(app_token: str, challenge: str) -> str:
    return hmac.new(app_token.encode("utf-8"), challenge.encode("utf-8"), hashlib.sha1).hexdigest()


def request_authorization(http: ApiClient, api: FreeboxApi, identity: AppIdentity,
                          poll_interval: float = AUTHORIZATION_POLL_INTERVAL,
                          sleep: Callable[[float], None] = time.sleep,
                          logger: Optional[logging.Logger] = None) -> str:
    """
    Ask the Freebox for a new app token and wait until the request is accepted.

    Returns the app token once the status is "granted". Any status other than
    "pending" or "granted" raises AuthorizationException.
    """
    log = logger or logging.getLogger(__name__)
    authorize_url = api.get_url("login/authorize/")
    response = http.post(authorize_url, identity.to_dict()) or {}
    app_token = response.get("app_token") or ""
    track_id = response.get("track_id")
    if not app_token or track_id is None:
        raise FreeboxApiException("POST", authorize_url, message="no app_token/track_id in the authorization response")

    counter = 0
    while True:
        counter += 1
        status = (http.get(api.get_url("login/authorize/%s", track_id)) or {}).get("status")
        if status == "pending":
            log.info(f"[{counter}] Please accept the login on the Freebox Server")
            sleep(poll_interval)
        elif status == "granted":
            log.info("Authorization granted")
            return app_token
        else:
            raise AuthorizationException(str(status))


class FreeboxSession:
    """
    Session token holder implementing the same get/post interface as HttpClient.

    The (challenge, session token) pair is replaced as a whole under a lock;
    readers only dereference the current pair.
    """

    def __init__(self, http: ApiClient, api: FreeboxApi, app_token: str,
                 identity: Optional[AppIdentity] = None,
                 clock: Callable[[], float] = time.monotonic,
                 min_refresh_interval: float = MIN_REFRESH_INTERVAL,
                 logger: Optional[logging.Logger] = None):
        if not app_token:
            raise ValueError("app_token is required")
        self.http = http
        self.api = api
        self.app_token = app_token
        self.identity = identity or default_identity()
        self.clock = clock
        self.min_refresh_interval = min_refresh_interval
        self.logger = logger or logging.getLogger(__name__)

        self.challenge_url = api.get_url("login/")
        self.session_token_url = api.get_url("login/session/")

        self._lock = threading.Lock()
        self._last_refresh: Optional[float] = None
        self._session_info: Optional[SessionInfo] = None

    def is_valid(self) -> bool:
        return self._session_info is not None

    @property
    def session_token(self) -> Optional[str]:
        info = self._session_info
        return info.session_token if info else None

    def login(self) -> None:
        self.refresh()
        self.logger.info("Logged in to the Freebox")

    def refresh(self) -> None:
        with self._lock:
            if self._last_refresh is not None:
                since_last_refresh = self.clock() - self._last_refresh
                if since_last_refresh < self.min_refresh_interval:
                    self.logger.debug(f"Session refreshed {since_last_refresh:.1f}s ago. Skipping")
                    return

            challenge = self.__get_challenge()
            session_token = self.__get_session_token(challenge)
            self._last_refresh = self.clock()
            self._session_info = SessionInfo(challenge=challenge, session_token=session_token)

    def get(self, url: str, headers: Optional[dict[str, str]] = None) -> Any:
        return self.__do(lambda: self.http.get(url, headers=self.__headers(headers)))

    def post(self, url: str, payload: Any = None, headers: Optional[dict[str, str]] = None) -> Any:
        return self.__do(lambda: self.http.post(url, payload, headers=self.__headers(headers)))

    def logout(self) -> None:
        try:
            # no refresh: an expired session has nothing left to close
            self.http.post(self.api.get_url("login/logout/"), headers=self.__headers(None))
            self.logger.info("Logged out from the Freebox")
        except (FreeboxException, requests.RequestException) as e:
            self.logger.warning(f"Logout failed: {e}")

    def __do(self, action: Callable[[], Any]) -> Any:
        try:
            return action()
        except AuthenticationException as e:
            self.logger.info(f"Session token rejected ({e.error_code}), refreshing")
            self.refresh()
            return action()

    def __headers(self, headers: Optional[dict[str, str]]) -> dict[str, str]:
        result = dict(headers or {})
        info = self._session_info
        if info is not None:
            result[AUTH_HEADER] = info.session_token
        return result

    def __get_challenge(self) -> str:
        self.logger.debug(f"GET challenge: {self.challenge_url}")
        result = self.http.get(self.challenge_url) or {}
        challenge = result.get("challenge")
        if not challenge:
            raise FreeboxApiException("GET", self.challenge_url, message="no challenge in the login response")
        return challenge

    def __get_session_token(self, challenge: str) -> str:
        self.logger.debug(f"POST session token: {self.session_token_url}")
        payload = {
            "app_id": self.identity.app_id,
            "password": compute_password(self.app_token, challenge),
        }
        result = self.http.post(self.session_token_url, payload) or {}
        session_token = result.get("session_token")
        if not session_token:
            raise FreeboxApiException("POST", self.session_token_url, message="no session_token in the login response")
        return session_token
