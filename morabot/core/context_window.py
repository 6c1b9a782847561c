# -*- coding: utf-8 -*-
"""
Окно контекста диалога.

Берём хвост истории, пока суммарная «стоимость» укладывается в бюджет.
Стоимость сообщения — len(content) + 10: длина в символах как грубая
оценка токенов плюс фиксированный оверхед. Это эвристика, не токенизатор.
"""

from typing import Any, Mapping, Sequence

DEFAULT_TOKEN_BUDGET = 900
MESSAGE_OVERHEAD = 10


def message_cost(message: Mapping[str, Any]) -> int:
    """Оценка стоимости одного сообщения."""
    return len(str(message.get("content") or "")) + MESSAGE_OVERHEAD


def select_context(
    history: Sequence[Mapping[str, Any]],
    budget: int = DEFAULT_TOKEN_BUDGET,
) -> list:
    """
    Возвращает суффикс истории (в хронологическом порядке), который влезает в бюджет.

    Жадно идём от новых к старым и останавливаемся на первом сообщении,
    которое не влезает, даже если более старое и короткое влезло бы.
    Самое новое сообщение включается всегда, даже если оно одно больше бюджета.
    """
    if not history:
        return []

    selected = []
    total = 0
    for message in reversed(history):
        cost = message_cost(message)
        if selected and total + cost > budget:
            break
        selected.append(message)
        total += cost

    selected.reverse()
    return selected
