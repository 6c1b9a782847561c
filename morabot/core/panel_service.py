# -*- coding: utf-8 -*-
"""
Panel Provisioning Service.

Зачем нужен модуль:
1. Выдавать пользователю аккаунт панели по выбранному тарифу.
2. Держать вызов бэкенда за интерфейсом create_user, чтобы реальный
   API панели подменял симуляцию без правок в хэндлерах.
3. Вести append-only журнал выданных аккаунтов (panel_accounts.json).
"""

from __future__ import annotations

import asyncio
import secrets
import string
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Protocol

import aiohttp
import structlog

from .exceptions import StorageError, UserInputError
from .json_store import JsonFileBackend

logger = structlog.get_logger(__name__)

PASSWORD_ALPHABET = string.ascii_letters + string.digits
PASSWORD_LENGTH = 12


@dataclass(frozen=True)
class PanelPlan:
    key: str
    size: str
    quota: int  # MB, -1 = без лимита
    duration: int  # дни


def _build_plans() -> dict[str, PanelPlan]:
    plans = {f"{n}gb": PanelPlan(f"{n}gb", f"{n}GB", 1024 * n, 30) for n in range(1, 11)}
    plans["unli"] = PanelPlan("unli", "Unlimited", -1, 30)
    plans["admin"] = PanelPlan("admin", "Admin", -1, 365)
    return plans


PANEL_PLANS: dict[str, PanelPlan] = _build_plans()


class PanelBackend(Protocol):
    async def create_user(self, payload: dict[str, Any]) -> dict[str, Any]:
        ...


class HttpPanelBackend:
    """Реальный API панели: POST JSON с Bearer-токеном."""

    def __init__(self, api_url: str, api_key: str, timeout: float = 10):
        self.api_url = api_url
        self.api_key = api_key.strip()
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    async def create_user(self, payload: dict[str, Any]) -> dict[str, Any]:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.api_url, json=payload, headers=self._headers()) as resp:
                    if resp.status < 200 or resp.status >= 300:
                        body = await resp.text()
                        return {"success": False, "error": f"HTTP {resp.status}: {body[:200]}"}
                    try:
                        data = await resp.json(content_type=None)
                    except ValueError as e:
                        return {"success": False, "error": f"malformed response: {e}"}
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("panel_api_failed", error=str(e))
            return {"success": False, "error": str(e) or type(e).__name__}
        if not isinstance(data, dict):
            return {"success": False, "error": f"unexpected response: {str(data)[:200]}"}
        return {**data, "success": bool(data.get("success"))}


class SimulatedPanelBackend:
    """Симуляция: бэкенда нет, запрос только логируется."""

    async def create_user(self, payload: dict[str, Any]) -> dict[str, Any]:
        logger.info(
            "panel_create_simulated",
            username=payload.get("username"),
            package=payload.get("package_type"),
            quota=payload.get("quota"),
        )
        return {"success": True, "simulated": True}


def build_backend(config) -> PanelBackend:
    """HTTP-бэкенд, если заданы и URL, и ключ; иначе симуляция."""
    if config.PANEL_API_URL and config.PANEL_API_KEY:
        return HttpPanelBackend(config.PANEL_API_URL, config.PANEL_API_KEY)
    logger.info("panel_backend_simulated")
    return SimulatedPanelBackend()


@dataclass
class PanelAccountResult:
    success: bool
    plan: PanelPlan
    username: str = ""
    password: str = ""
    panel_url: str = ""
    panel_port: str = ""
    expires_at: str = ""
    error: Optional[str] = None

    @property
    def panel_link(self) -> str:
        return f"{self.panel_url}:{self.panel_port}"


class PanelProvisioningService:
    """Выдача аккаунтов панели."""

    def __init__(
        self,
        backend: PanelBackend,
        ledger: JsonFileBackend,
        panel_url: str,
        panel_port: str,
    ):
        self.backend = backend
        self.ledger = ledger
        self.panel_url = panel_url.rstrip("/")
        self.panel_port = str(panel_port)

    @staticmethod
    def get_plan(plan_key: str) -> PanelPlan:
        plan = PANEL_PLANS.get((plan_key or "").strip().lower())
        if plan is None:
            raise UserInputError(f"unknown plan {plan_key!r}", user_message="❌ Неизвестный тариф!")
        return plan

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def generate_username(user_id: int) -> str:
        return f"user_{user_id}_{str(int(time.time() * 1000))[-6:]}"

    @staticmethod
    def generate_password(length: int = PASSWORD_LENGTH) -> str:
        return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))

    async def create_account(self, plan_key: str, user_id: int, user_name: str) -> PanelAccountResult:
        plan = self.get_plan(plan_key)
        username = self.generate_username(user_id)
        password = self.generate_password()

        payload = {
            "action": "create_user",
            "username": username,
            "password": password,
            "quota": plan.quota,
            "duration": plan.duration,
            "package_type": plan.size,
        }
        response = await self.backend.create_user(payload)
        if not response.get("success"):
            error = str(response.get("error") or "панель отклонила запрос")
            logger.warning("panel_create_failed", user_id=user_id, plan=plan.key, error=error)
            return PanelAccountResult(success=False, plan=plan, error=error)

        created_at = self._now()
        expires_at = created_at + timedelta(days=plan.duration)
        entry = {
            "username": username,
            "password": password,
            "userId": user_id,
            "userName": user_name,
            "package": plan.size,
            "createdAt": created_at.isoformat(),
            "expiresAt": expires_at.isoformat(),
        }
        try:
            self.ledger.append(entry)
        except StorageError as e:
            # Аккаунт уже создан на бэкенде: выдаём его, но громко логируем
            logger.error("panel_ledger_write_failed", username=username, error=str(e))

        logger.info("panel_account_created", username=username, user_id=user_id, plan=plan.key)
        return PanelAccountResult(
            success=True,
            plan=plan,
            username=username,
            password=password,
            panel_url=self.panel_url,
            panel_port=self.panel_port,
            expires_at=expires_at.isoformat(),
        )
