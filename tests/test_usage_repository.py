import sqlite3
from unittest import mock

import pytest

from repositories.usage_repository import UsageLedgerError, UsageRepository

ART_A = "https://cards.scryfall.io/art_crop/front/a/a.jpg"
ART_B = "https://cards.scryfall.io/art_crop/front/b/b.jpg"


# ============= Deck names =============


def test_upsert_deck_name_strips_whitespace(usage_repo):
    record = usage_repo.upsert_deck_name("  Mono Red  ")

    assert record.name == "Mono Red"
    assert [r.name for r in usage_repo.find_deck_names("mono")] == ["Mono Red"]


@pytest.mark.parametrize("name", ["", "   ", "x" * 101])
def test_upsert_deck_name_rejects_invalid_names(usage_repo, name):
    with pytest.raises(ValueError):
        usage_repo.upsert_deck_name(name)


def test_upsert_deck_name_accepts_max_length(usage_repo):
    assert usage_repo.upsert_deck_name("x" * 100).name == "x" * 100


def test_deck_name_upsert_only_refreshes_timestamp(usage_repo):
    first = usage_repo.upsert_deck_name("Azorius Control")
    second = usage_repo.upsert_deck_name("Azorius Control")

    records = usage_repo.find_deck_names("azorius")
    assert len(records) == 1
    assert records[0].name == "Azorius Control"
    assert records[0].last_used_at == second.last_used_at
    assert second.last_used_at > first.last_used_at


def test_deck_names_are_case_sensitive_keys(usage_repo):
    usage_repo.upsert_deck_name("Burn")
    usage_repo.upsert_deck_name("burn")

    assert {r.name for r in usage_repo.find_deck_names("BURN")} == {"Burn", "burn"}


def test_find_deck_names_orders_by_recency_and_limits(usage_repo):
    for index in range(12):
        usage_repo.upsert_deck_name(f"Deck {index}")
    usage_repo.upsert_deck_name("Deck 3")

    records = usage_repo.find_deck_names("deck")

    assert len(records) == 10
    assert records[0].name == "Deck 3"
    assert records[1].name == "Deck 11"
    stamps = [r.last_used_at for r in records]
    assert stamps == sorted(stamps, reverse=True)


def test_find_deck_names_matches_substrings_only(usage_repo):
    usage_repo.upsert_deck_name("Mono Red")
    usage_repo.upsert_deck_name("Azorius Control")

    assert [r.name for r in usage_repo.find_deck_names("red")] == ["Mono Red"]
    assert usage_repo.find_deck_names("golgari") == []
    assert usage_repo.find_deck_names("") == []


def test_find_deck_names_treats_wildcards_literally(usage_repo):
    usage_repo.upsert_deck_name("Mono Red")
    usage_repo.upsert_deck_name("100% Burn")

    assert [r.name for r in usage_repo.find_deck_names("%")] == ["100% Burn"]


def test_find_deck_names_folds_non_ascii_case(usage_repo):
    usage_repo.upsert_deck_name("Ñoño Tempo")
    usage_repo.upsert_deck_name("ÉLDRAZI Ramp")

    assert [r.name for r in usage_repo.find_deck_names("ñ")] == ["Ñoño Tempo"]
    assert [r.name for r in usage_repo.find_deck_names("éldrazi")] == ["ÉLDRAZI Ramp"]


# ============= Art usage =============


def test_art_usage_upsert_is_idempotent(usage_repo):
    usage_repo.upsert_art_usage(ART_A, "print-1")
    later = usage_repo.upsert_art_usage(ART_A, "print-1")

    records = usage_repo.find_art_usage([ART_A])
    assert usage_repo.count_art_usage() == 1
    assert records[0].last_used_at == later.last_used_at


def test_art_usage_update_overwrites_card_id(usage_repo):
    usage_repo.upsert_art_usage(ART_A, "print-1")
    usage_repo.upsert_art_usage(ART_A, "print-9")

    assert usage_repo.find_art_usage([ART_A])[0].card_id == "print-9"


def test_find_art_usage_returns_only_known_urls(usage_repo):
    usage_repo.upsert_art_usage(ART_A, "print-1")

    records = usage_repo.find_art_usage([ART_A, ART_B])

    assert [r.art_url for r in records] == [ART_A]


def test_find_art_usage_empty_list_skips_database(usage_repo):
    with mock.patch.object(usage_repo, "_connect") as connect:
        assert usage_repo.find_art_usage([]) == []
    connect.assert_not_called()


def test_upsert_art_usage_requires_url_and_card(usage_repo):
    with pytest.raises(ValueError):
        usage_repo.upsert_art_usage("", "print-1")


# ============= Errors =============


def test_database_errors_raise_ledger_error(usage_repo):
    with mock.patch.object(usage_repo, "_connect", side_effect=sqlite3.OperationalError("locked")):
        with pytest.raises(UsageLedgerError):
            usage_repo.upsert_deck_name("Mono Red")
        with pytest.raises(UsageLedgerError):
            usage_repo.find_art_usage([ART_A])


def test_unwritable_location_raises_ledger_error(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("")

    with pytest.raises(UsageLedgerError):
        UsageRepository(db_path=blocker / "usage.db")
