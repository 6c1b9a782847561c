# -*- coding: utf-8 -*-
"""Morabot — Telegram-бот: AI-собеседник, загрузка медиа на хостинг и набор команд поверх внешних API."""

__version__ = "2.1.0"
