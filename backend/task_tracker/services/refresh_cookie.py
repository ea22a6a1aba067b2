from __future__ import annotations

from fastapi import Request, Response

from task_tracker.core.config import settings


# -----------------------------
# Cookie helpers
# -----------------------------
def cookie_name() -> str:
    return str(getattr(settings, "REFRESH_COOKIE_NAME", "refreshToken")).strip() or "refreshToken"


def cookie_path() -> str:
    return str(getattr(settings, "REFRESH_COOKIE_PATH", "/")).strip() or "/"


def cookie_secure() -> bool:
    # Prod => HTTPS => Secure cookies. Dev http://localhost => must be False.
    return settings.is_prod


def cookie_samesite() -> str:
    v = str(getattr(settings, "REFRESH_COOKIE_SAMESITE", "strict")).lower().strip()
    if v not in {"lax", "strict", "none"}:
        return "strict"
    return v


def refresh_cookie_max_age_seconds() -> int:
    return int(settings.refresh_token_lifetime.total_seconds())


def set_refresh_cookie(resp: Response, raw_refresh_token: str) -> None:
    resp.set_cookie(
        key=cookie_name(),
        value=raw_refresh_token,
        httponly=True,
        secure=cookie_secure(),
        samesite=cookie_samesite(),
        max_age=refresh_cookie_max_age_seconds(),
        path=cookie_path(),
        domain=settings.REFRESH_COOKIE_DOMAIN,
    )


def clear_refresh_cookie(resp: Response) -> None:
    resp.delete_cookie(
        key=cookie_name(),
        path=cookie_path(),
        domain=settings.REFRESH_COOKIE_DOMAIN,
        httponly=True,
        secure=cookie_secure(),
        samesite=cookie_samesite(),
    )


def read_refresh_cookie(req: Request) -> str | None:
    val = req.cookies.get(cookie_name())
    if not val:
        return None
    val = val.strip()
    return val or None
