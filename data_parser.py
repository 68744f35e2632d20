"""
Decoders that turn raw Pocket API JSON into validated models.

Each parser either returns a fully validated value or raises
ResponseValidationError naming the first offending field.
"""

from typing import Any, Dict, List, Sequence, Union

from pydantic import TypeAdapter, ValidationError

from errors import ResponseValidationError
from models import (
    ActionOutcome,
    AddedItem,
    AddResponse,
    Authorization,
    ModifyAction,
    ModifyResponse,
    ModifyResult,
    RequestToken,
    RetrievedItem,
    RetrieveResponse,
)

_retrieved_item_adapter = TypeAdapter(RetrievedItem)
_modify_actions_adapter = TypeAdapter(List[ModifyAction])


def _format_path(loc: Sequence[Union[str, int]]) -> str:
    return ".".join(str(part) for part in loc) or "<root>"


def _decode(schema: Union[type, TypeAdapter], raw: Any, operation: str) -> Any:
    try:
        if isinstance(schema, TypeAdapter):
            return schema.validate_python(raw)
        return schema.model_validate(raw)
    except ValidationError as e:
        first = e.errors(include_url=False)[0]
        raise ResponseValidationError(
            operation,
            path=_format_path(first["loc"]),
            expected=first["msg"],
            actual=first.get("input"),
        ) from e


def parse_request_token(raw: Any) -> RequestToken:
    return _decode(RequestToken, raw, "request token")


def parse_authorization(raw: Any) -> Authorization:
    return _decode(Authorization, raw, "authorize")


def parse_add_response(raw: Any) -> AddedItem:
    """Validate an ``/v3/add`` response and return the added item."""
    return _decode(AddResponse, raw, "add").item


def parse_retrieved_item(raw: Any) -> RetrievedItem:
    """
    Decode one entry of a ``/v3/get`` list.

    The ``status`` field is checked first: "2" yields a TombstoneItem that
    only has ``item_id`` and ``status``; "0"/"1" yields a full LiveItem.
    """
    return _decode(_retrieved_item_adapter, raw, "retrieve")


def parse_retrieve_response(raw: Any) -> RetrieveResponse:
    return _decode(RetrieveResponse, raw, "retrieve")


def coerce_modify_actions(actions: Sequence[Any]) -> List[ModifyAction]:
    """
    Turn caller-supplied actions (models or plain dicts) into ModifyAction
    models. Invalid input raises pydantic's ValidationError (a ValueError).
    """
    if isinstance(actions, (str, bytes, dict)):
        raise TypeError("actions must be a sequence of actions")
    return _modify_actions_adapter.validate_python(list(actions))


def parse_modify_response(raw: Any, actions: Sequence[ModifyAction]) -> ModifyResult:
    """
    Validate a ``/v3/send`` response against the submitted batch.

    ``action_results`` is positional: result ``i`` belongs to ``actions[i]``.
    A length mismatch means the pairing is lost and is treated as invalid.
    """
    response = _decode(ModifyResponse, raw, "modify")
    results = list(response.action_results)
    if len(results) != len(actions):
        raise ResponseValidationError(
            "modify",
            path="action_results",
            expected=f"{len(actions)} results, one per submitted action",
            actual=results,
        )

    errors = list(response.action_errors or [])
    if errors and len(errors) != len(actions):
        raise ResponseValidationError(
            "modify",
            path="action_errors",
            expected=f"{len(actions)} entries, one per submitted action",
            actual=[error.to_wire() if error else None for error in errors],
        )

    outcomes = [
        ActionOutcome(
            index=index,
            action=action,
            applied=applied,
            error=errors[index] if errors else None,
        )
        for index, (action, applied) in enumerate(zip(actions, results))
    ]
    return ModifyResult(status=response.status, action_results=results, outcomes=outcomes)


def summarize_items(items: Dict[str, RetrievedItem]) -> Dict[str, int]:
    """Count live, archived and deleted entries in a retrieved list."""
    summary = {"unread": 0, "archived": 0, "deleted": 0}
    for item in items.values():
        if item.status == "2":
            summary["deleted"] += 1
        elif item.status == "1":
            summary["archived"] += 1
        else:
            summary["unread"] += 1
    return summary
