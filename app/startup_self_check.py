from __future__ import annotations

import logging
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class StartupSelfCheckResult:
    issues: list[str]
    ai_enabled: bool = False
    completion_base_url_configured: bool = False
    completion_base_url_secure: bool = True
    chat_history_persistent: bool = False


def run_startup_self_check(logger: logging.Logger) -> StartupSelfCheckResult:
    result = analyze_startup_config(
        ai_enabled=_parse_bool_env("TRANQUIL_AI_ENABLED", default=False),
        completion_base_url=os.getenv("TRANQUIL_COMPLETION_BASE_URL"),
        chat_history_file=os.getenv("TRANQUIL_CHAT_HISTORY_FILE"),
    )

    if "completion_base_url_missing" in result.issues:
        logger.warning(
            "startup_self_check anomaly=completion_base_url_missing "
            "detail=set_TRANQUIL_COMPLETION_BASE_URL_or_disable_ai"
        )
    if "completion_base_url_insecure" in result.issues:
        logger.warning(
            "startup_self_check anomaly=completion_base_url_insecure "
            "detail=use_https_for_non_local_proxy"
        )
    if not result.chat_history_persistent:
        logger.info("startup_self_check chat_history=in_memory")
    if not result.issues:
        logger.info("startup_self_check ok ai_enabled=%s", result.ai_enabled)
    return result


def analyze_startup_config(
    *,
    ai_enabled: bool,
    completion_base_url: str | None,
    chat_history_file: str | None = None,
) -> StartupSelfCheckResult:
    issues: list[str] = []
    base_url = (completion_base_url or "").strip()
    base_url_configured = bool(base_url)
    base_url_secure = True
    if base_url_configured:
        lowered = base_url.lower()
        local = any(
            lowered.startswith(prefix)
            for prefix in ("http://127.0.0.1", "http://localhost", "http://[::1]")
        )
        base_url_secure = lowered.startswith("https://") or local

    if ai_enabled and not base_url_configured:
        issues.append("completion_base_url_missing")
    if ai_enabled and base_url_configured and not base_url_secure:
        issues.append("completion_base_url_insecure")

    return StartupSelfCheckResult(
        issues=issues,
        ai_enabled=ai_enabled,
        completion_base_url_configured=base_url_configured,
        completion_base_url_secure=base_url_secure,
        chat_history_persistent=bool((chat_history_file or "").strip()),
    )


@dataclass(frozen=True)
class ProxySelfCheckResult:
    issues: list[str]
    openrouter_api_key_configured: bool = False
    proxy_token_configured: bool = False


def run_proxy_self_check(logger: logging.Logger) -> ProxySelfCheckResult:
    result = analyze_proxy_config(
        openrouter_api_key=os.getenv("OPENROUTER_API_KEY"),
        proxy_token=os.getenv("COMPLETION_PROXY_TOKEN"),
    )
    if "openrouter_api_key_missing" in result.issues:
        logger.warning(
            "proxy_self_check anomaly=openrouter_api_key_missing "
            "detail=set_OPENROUTER_API_KEY_on_the_proxy_host"
        )
    if not result.proxy_token_configured:
        logger.info("proxy_self_check inbound_auth=disabled")
    if not result.issues:
        logger.info("proxy_self_check ok")
    return result


def analyze_proxy_config(
    *,
    openrouter_api_key: str | None,
    proxy_token: str | None = None,
) -> ProxySelfCheckResult:
    issues: list[str] = []
    key_configured = bool((openrouter_api_key or "").strip())
    if not key_configured:
        issues.append("openrouter_api_key_missing")
    return ProxySelfCheckResult(
        issues=issues,
        openrouter_api_key_configured=key_configured,
        proxy_token_configured=bool((proxy_token or "").strip()),
    )


def _parse_bool_env(name: str, *, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default
