from __future__ import annotations

import json
import logging
import re
import time
from datetime import datetime, timezone
from typing import Any, Dict, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from starlette.responses import Response

logger = logging.getLogger("presley_site.cookies")

AUTH_COOKIE_NAME = "userCredentials"
DESIGN_COOKIE_NAME = "customDesign"

# `#rgb`, `#rrggbb` and the alpha variants.
COLOR_PATTERN = r"^#[0-9a-fA-F]{3,8}$"


class CookieError(LookupError):
    """A cookie is missing or its value cannot be parsed."""


class Design(BaseModel):
    """User design preferences stored in the design cookie."""

    model_config = ConfigDict(populate_by_name=True)

    primary_color: str = Field(default="#F5D0C5", alias="primaryColor", pattern=COLOR_PATTERN)
    secondary_color: str = Field(default="#D69F7E", alias="secondaryColor", pattern=COLOR_PATTERN)
    title_size: int = Field(default=42, alias="titleSize", ge=1, le=200)
    text_transform: Literal["none", "uppercase", "lowercase", "capitalize"] = Field(
        default="none", alias="textTransform"
    )
    opacity: int = Field(default=100, ge=0, le=100)

    def to_json(self) -> str:
        return json.dumps(self.model_dump(by_alias=True), ensure_ascii=False, separators=(",", ":"))


DEFAULT_DESIGN = Design()


def _now_ms() -> int:
    return int(time.time() * 1000)


class Cookie:
    """A single named cookie, read from a request's cookie mapping and written onto a response."""

    def __init__(self, name: str) -> None:
        self.name = name

    def set(
        self,
        response: Response,
        value: str,
        age: Optional[int] = None,
        expires: Optional[int] = None,
    ) -> None:
        """
        Write the cookie with either a max-age (seconds) or an explicit expiry (epoch ms).
        """
        if age is not None:
            response.set_cookie(self.name, value, max_age=int(age), path="/")
            return
        expires_at = None
        if expires is not None:
            expires_at = datetime.fromtimestamp(int(expires) / 1000, tz=timezone.utc)
        response.set_cookie(self.name, value, expires=expires_at, path="/")

    def get_value(self, cookies: Mapping[str, str]) -> str:
        if self.name not in cookies:
            raise CookieError(f"cookie {self.name!r} is not set")
        return cookies[self.name]

    def remove(self, response: Response) -> None:
        response.delete_cookie(self.name, path="/")

    def exists(self, cookies: Mapping[str, str]) -> bool:
        return self.name in cookies


class AuthCookie(Cookie):
    """
    Authorization cookie: `"<user> <password> <expiration-epoch-ms>"` in clear text.

    The server never checks the credentials; an existing cookie means "logged in".
    """

    _value_re = re.compile(r"^(\w+) (\w+) (\d+)$")

    def set_authorization(self, response: Response, user: str, password: str, age: int) -> None:
        self.set(response, f"{user} {password} {_now_ms() + int(age) * 1000}", age)

    def _match(self, cookies: Mapping[str, str]) -> "re.Match[str]":
        value = self.get_value(cookies)
        m = self._value_re.match(value.strip())
        if not m:
            raise CookieError(f"cookie {self.name!r} has an unexpected value")
        return m

    def get_user(self, cookies: Mapping[str, str]) -> str:
        return self._match(cookies).group(1)

    def get_expiration(self, cookies: Mapping[str, str]) -> int:
        """Expiration date in epoch milliseconds; raises `CookieError` when it is not a representable date."""
        expiration = int(self._match(cookies).group(3))
        try:
            # Greetings format it in local time, Set-Cookie in UTC.
            datetime.fromtimestamp(expiration / 1000)
            datetime.fromtimestamp(expiration / 1000, tz=timezone.utc)
        except (OverflowError, ValueError, OSError) as e:
            raise CookieError(f"cookie {self.name!r} has an out-of-range expiration: {e}") from e
        return expiration


class DesignCookie(Cookie):
    """
    Design cookie holding a JSON-serialized `Design`.

    Without an explicit max-age, the cookie expires together with the authorization cookie.
    """

    def __init__(self, name: str, auth: AuthCookie) -> None:
        super().__init__(name)
        self.auth = auth

    def set_design(
        self,
        response: Response,
        design: Design | Dict[str, Any],
        age: Optional[int] = None,
        cookies: Optional[Mapping[str, str]] = None,
    ) -> None:
        if isinstance(design, dict):
            design = Design.model_validate(design)
        if age is None:
            cookies = cookies or {}
            # No usable authorization cookie to follow: a session cookie.
            expires = None
            if self.auth.exists(cookies):
                try:
                    expires = self.auth.get_expiration(cookies)
                except CookieError as e:
                    logger.warning("[cookies] design cookie falls back to session lifetime err=%s", e)
            self.set(response, design.to_json(), expires=expires)
        else:
            self.set(response, design.to_json(), age)

    def get_design(self, cookies: Mapping[str, str]) -> Design:
        raw = self.get_value(cookies)
        try:
            return Design.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as e:
            raise CookieError(f"cookie {self.name!r} does not hold a design: {e}") from e


auth_cookie = AuthCookie(AUTH_COOKIE_NAME)
design_cookie = DesignCookie(DESIGN_COOKIE_NAME, auth=auth_cookie)
