"""
Thumbnail State - Immutable editor state and its transitions.

The controller owns a single ``ThumbnailState`` and replaces it with the
result of one of the transition functions below. Transitions never perform
I/O and never raise for unexpected input: a transition that does not apply
returns the state it was given.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from pathlib import Path

from navigators.scryfall import CardArtOption
from utils.layout_engine import (
    CANVAS_HEIGHT_DEFAULT,
    CANVAS_WIDTH_DEFAULT,
    MODE_STREAM,
    MODE_VIDEO,
    MODES,
    QUADRANT_SLOTS,
    LayoutInputs,
    LogoChoice,
    resolve_logo,
)
from utils.thumbnail_names import format_stream_date

SIDE_LEFT = "left"
SIDE_RIGHT = "right"


@dataclass(frozen=True)
class CardSlotState:
    """Card and chosen art for one quadrant."""

    card_name: str = ""
    art_url: str | None = None
    card_id: str | None = None
    set_code: str | None = None

    @property
    def has_art(self) -> bool:
        return bool(self.art_url)


@dataclass(frozen=True)
class PendingSelection:
    slot: str
    card_name: str


@dataclass(frozen=True)
class ArtDialogState:
    """Art picker contents for the slot awaiting a choice."""

    slot: str
    card_name: str
    options: tuple[CardArtOption, ...]
    usage: Mapping[str, datetime] = field(default_factory=dict)

    def last_used(self, option: CardArtOption) -> datetime | None:
        return self.usage.get(option.art_url)


@dataclass(frozen=True)
class CustomLogoSettings:
    path: Path
    x: float | None = None
    y: float | None = None
    y_offset: float = 0.0


def _empty_slots() -> dict[str, CardSlotState]:
    return {slot: CardSlotState() for slot in QUADRANT_SLOTS}


@dataclass(frozen=True)
class ThumbnailState:
    slots: Mapping[str, CardSlotState] = field(default_factory=_empty_slots)
    left_deck_name: str = ""
    right_deck_name: str = ""
    mode: str = MODE_VIDEO
    stream_date: date = field(default_factory=date.today)
    event_name: str = ""
    custom_logo: CustomLogoSettings | None = None
    pending: PendingSelection | None = None
    art_dialog: ArtDialogState | None = None

    def slot(self, slot: str) -> CardSlotState:
        return self.slots.get(slot, CardSlotState())

    @property
    def filled_slots(self) -> frozenset[str]:
        return frozenset(slot for slot, card in self.slots.items() if card.has_art)


def _with_slot(state: ThumbnailState, slot: str, card: CardSlotState) -> ThumbnailState:
    slots = dict(state.slots)
    slots[slot] = card
    return replace(state, slots=slots)


# ============= Deck names =============


def set_deck_name(state: ThumbnailState, side: str, name: str) -> ThumbnailState:
    if side == SIDE_LEFT:
        return replace(state, left_deck_name=name)
    if side == SIDE_RIGHT:
        return replace(state, right_deck_name=name)
    return state


# ============= Card and art selection =============


def select_card(state: ThumbnailState, slot: str, card_name: str) -> ThumbnailState:
    """Start picking art for ``card_name`` in ``slot``; an empty name clears the slot."""
    if slot not in QUADRANT_SLOTS:
        return state
    name = (card_name or "").strip()
    if not name:
        cleared = _with_slot(state, slot, CardSlotState())
        return replace(cleared, pending=None, art_dialog=None)
    updated = _with_slot(state, slot, CardSlotState(card_name=name))
    return replace(updated, pending=PendingSelection(slot, name), art_dialog=None)


def arts_loaded(
    state: ThumbnailState,
    slot: str,
    card_name: str,
    options: Iterable[CardArtOption],
) -> ThumbnailState:
    """Open the art picker with ``options`` if they answer the pending selection."""
    pending = state.pending
    if pending is None or pending.slot != slot or pending.card_name != card_name:
        return state
    found = tuple(options)
    if not found:
        cleared = _with_slot(state, slot, CardSlotState())
        return replace(cleared, pending=None, art_dialog=None)
    return replace(state, art_dialog=ArtDialogState(slot, card_name, found))


def usage_loaded(
    state: ThumbnailState, card_name: str, usage: Mapping[str, datetime]
) -> ThumbnailState:
    dialog = state.art_dialog
    if dialog is None or dialog.card_name != card_name:
        return state
    return replace(state, art_dialog=replace(dialog, usage=dict(usage)))


def select_art(state: ThumbnailState, option: CardArtOption) -> ThumbnailState:
    """Assign ``option`` to the slot the art picker was opened for."""
    dialog = state.art_dialog
    if dialog is None:
        return state
    card = CardSlotState(
        card_name=dialog.card_name,
        art_url=option.art_url,
        card_id=option.print_id,
        set_code=option.set_code,
    )
    updated = _with_slot(state, dialog.slot, card)
    return replace(updated, pending=None, art_dialog=None)


def close_art_dialog(state: ThumbnailState) -> ThumbnailState:
    target = state.art_dialog.slot if state.art_dialog else None
    if target is None and state.pending is not None:
        target = state.pending.slot
    closed = replace(state, pending=None, art_dialog=None)
    if target is not None and not closed.slot(target).has_art:
        closed = _with_slot(closed, target, CardSlotState())
    return closed


def swap_quadrants(state: ThumbnailState, first: str, second: str) -> ThumbnailState:
    if first == second or first not in QUADRANT_SLOTS or second not in QUADRANT_SLOTS:
        return state
    slots = dict(state.slots)
    slots[first], slots[second] = state.slot(second), state.slot(first)
    return replace(state, slots=slots)


# ============= Mode, stream details and logo =============


def change_mode(state: ThumbnailState, mode: str) -> ThumbnailState:
    """Switch thumbnail mode; entering Stream drops both deck names."""
    if mode not in MODES or mode == state.mode:
        return state
    if mode == MODE_STREAM:
        return replace(state, mode=mode, left_deck_name="", right_deck_name="")
    return replace(state, mode=mode)


def set_stream_details(
    state: ThumbnailState, stream_date: date | None = None, event_name: str | None = None
) -> ThumbnailState:
    return replace(
        state,
        stream_date=stream_date if stream_date is not None else state.stream_date,
        event_name=event_name if event_name is not None else state.event_name,
    )


def set_custom_logo(
    state: ThumbnailState,
    path: Path,
    x: float | None = None,
    y: float | None = None,
    y_offset: float = 0.0,
) -> ThumbnailState:
    return replace(state, custom_logo=CustomLogoSettings(Path(path), x, y, y_offset))


def clear_custom_logo(state: ThumbnailState) -> ThumbnailState:
    return replace(state, custom_logo=None)


# ============= Layout =============


def resolve_state_logo(
    state: ThumbnailState,
    default_size: tuple[int, int] | None,
    custom_size: tuple[int, int] | None = None,
) -> LogoChoice:
    """Logo choice for ``state`` given the sizes of whichever logos loaded."""
    custom = state.custom_logo
    if custom is None:
        return resolve_logo(default_size)
    return resolve_logo(
        default_size, custom_size, x=custom.x, y=custom.y, y_offset=custom.y_offset
    )


def layout_inputs(
    state: ThumbnailState,
    logo: LogoChoice,
    width: int = CANVAS_WIDTH_DEFAULT,
    height: int = CANVAS_HEIGHT_DEFAULT,
) -> LayoutInputs:
    return LayoutInputs(
        width=width,
        height=height,
        left_deck_name=state.left_deck_name,
        right_deck_name=state.right_deck_name,
        filled_slots=state.filled_slots,
        mode=state.mode,
        stream_date_text=format_stream_date(state.stream_date),
        event_name=state.event_name,
        logo=logo,
    )


__all__ = [
    "ArtDialogState",
    "CardSlotState",
    "CustomLogoSettings",
    "PendingSelection",
    "SIDE_LEFT",
    "SIDE_RIGHT",
    "ThumbnailState",
    "arts_loaded",
    "change_mode",
    "clear_custom_logo",
    "close_art_dialog",
    "layout_inputs",
    "resolve_state_logo",
    "select_art",
    "select_card",
    "set_custom_logo",
    "set_deck_name",
    "set_stream_details",
    "swap_quadrants",
    "usage_loaded",
]
