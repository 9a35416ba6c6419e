from datetime import UTC

import pytest

from takeout_wrapped.insights import GroupChampionInsight, VoucherHoarderInsight
from takeout_wrapped.models import Channel
from takeout_wrapped.store import DataStore, State

TX_MEMBER = "Google transactions/transactions_42.csv"
TX_CSV = (
    "Time,ID,Description,Amount\n"
    "2023-06-01T10:00:00+00:00,T1,Swiggy,INR 100.00\n"
    "2024-02-01T10:00:00+00:00,T2,Uber,INR 300.00\n"
)
RAW = {Channel.TRANSACTIONS: TX_CSV, Channel.VOUCHER_REWARDS: '[{"code": "A"}]'}


def _voucher_deriver(data, year):
    return [
        {
            "type": "voucher_hoarder",
            "title": f"Vouchers {year}",
            "message": f"{len(data.transactions)} transactions",
            "tone": "funny",
            "data": {
                "total_vouchers": len(data.voucher_rewards),
                "expired": 0,
                "active": len(data.voucher_rewards),
                "waste_percentage": 0.0,
            },
        }
    ]


def test_initial_state():
    store = DataStore()

    assert store.state is State.EMPTY
    assert store.raw_data is None
    assert store.parsed_data is None
    assert store.filtered_data is None
    assert store.selected_year == "all"
    assert store.error is None
    assert store.insights == ()
    assert store.is_loading is False


def test_set_raw_then_parse():
    store = DataStore(tz=UTC)

    store.set_raw_data(RAW)
    assert store.state is State.RAW_LOADED
    assert store.parsed_data is None

    store.parse_raw_data()
    assert store.state is State.PARSED
    assert store.error is None
    assert store.parsed_data.counts()["transactions"] == 2
    assert store.filtered_data is store.parsed_data


def test_parse_without_raw_is_a_no_op():
    store = DataStore()
    store.parse_raw_data()
    assert store.state is State.EMPTY


def test_failed_parse_keeps_previous_snapshot():
    store = DataStore()
    store.set_raw_data(RAW)
    store.parse_raw_data()
    good = store.parsed_data

    store.set_raw_data({Channel.TRANSACTIONS: 'Time,ID\n"2024"x,A\n'})
    store.parse_raw_data()

    assert store.state is State.ERROR
    assert store.error.startswith("transactions: CSV parsing error")
    assert store.parsed_data is good


def test_year_selection_scopes_view_and_insights():
    store = DataStore(deriver=_voucher_deriver, tz=UTC)
    seen = []
    store.subscribe(lambda s: seen.append(s.selected_year))
    store.set_raw_data(RAW)
    store.parse_raw_data()
    snapshot = store.parsed_data

    (insight,) = store.insights
    assert isinstance(insight, VoucherHoarderInsight)
    assert insight.message == "2 transactions"

    store.set_selected_year("2024")

    assert store.selected_year == "2024"
    assert [t.id for t in store.filtered_data.transactions] == ["T2"]
    assert store.parsed_data is snapshot
    assert store.insights[0].title == "Vouchers 2024"
    assert store.insights[0].message == "1 transactions"
    assert store.insights[0].data.total_vouchers == 1
    assert seen[-1] == "2024"


def test_invalid_year_is_rejected_and_state_unchanged():
    store = DataStore()
    with pytest.raises(ValueError):
        store.set_selected_year("twenty")
    assert store.selected_year == "all"


def _mismatched_payload_deriver(data, year):
    return [
        {
            "type": "group_champion",
            "title": "t",
            "message": "m",
            "data": {"partner_name": "x", "split_count": 1},
        }
    ]


def test_mismatched_insight_payload_moves_store_to_error():
    store = DataStore(deriver=_mismatched_payload_deriver)
    store.set_raw_data(RAW)
    store.parse_raw_data()

    assert store.state is State.ERROR
    assert "group_champion" in store.error
    assert store.parsed_data is None
    assert store.insights == ()


def test_failing_deriver_keeps_previous_snapshot_and_notifies():
    calls = []

    def flaky_deriver(data, year):
        if calls:
            raise RuntimeError("deriver exploded")
        calls.append(year)
        return _voucher_deriver(data, year)

    store = DataStore(deriver=flaky_deriver, tz=UTC)
    store.set_raw_data(RAW)
    store.parse_raw_data()
    good, good_insights = store.parsed_data, store.insights
    seen = []
    store.subscribe(lambda s: seen.append(s.state))

    store.set_raw_data({Channel.TRANSACTIONS: TX_CSV})
    store.parse_raw_data()

    assert store.state is State.ERROR
    assert store.error == "deriver exploded"
    assert store.parsed_data is good
    assert store.insights == good_insights
    assert seen == [State.RAW_LOADED, State.ERROR]


def test_failing_deriver_on_year_change_clears_insights_and_notifies():
    def deriver(data, year):
        if year == "2024":
            raise RuntimeError("no insights for 2024")
        return _voucher_deriver(data, year)

    store = DataStore(deriver=deriver, tz=UTC)
    store.set_raw_data(RAW)
    store.parse_raw_data()
    snapshot = store.parsed_data
    seen = []
    store.subscribe(lambda s: seen.append((s.selected_year, s.insights)))

    store.set_selected_year("2024")

    assert store.state is State.PARSED
    assert store.selected_year == "2024"
    assert store.parsed_data is snapshot
    assert [t.id for t in store.filtered_data.transactions] == ["T2"]
    assert store.insights == ()
    assert seen == [("2024", ())]

    store.set_selected_year("all")
    assert len(store.insights) == 1


def test_deriver_may_return_models():
    champ = GroupChampionInsight(
        title="Champ",
        message="Always pays",
        data={"reliability_score": 0.9, "total_splits": 3, "paid_count": 2, "total_count": 3},
    )
    store = DataStore(deriver=lambda data, year: [champ])
    store.set_raw_data(RAW)
    store.parse_raw_data()

    assert store.insights == (champ,)


def test_reset_restores_defaults(monkeypatch):
    monkeypatch.setenv("TAKEOUT_WRAPPED_DEFAULT_YEAR", "2023")
    store = DataStore(deriver=_voucher_deriver)
    assert store.selected_year == "2023"

    store.set_raw_data(RAW)
    store.parse_raw_data()
    store.set_selected_year("all")
    store.reset()

    assert store.state is State.EMPTY
    assert store.raw_data is None
    assert store.parsed_data is None
    assert store.insights == ()
    assert store.selected_year == "2023"


def test_explicit_default_year_wins_over_environment(monkeypatch):
    monkeypatch.setenv("TAKEOUT_WRAPPED_DEFAULT_YEAR", "2023")
    assert DataStore(default_year="2021").selected_year == "2021"


def test_subscribe_and_unsubscribe():
    store = DataStore()
    calls = []
    unsubscribe = store.subscribe(lambda s: calls.append(s.state))

    store.set_raw_data(RAW)
    store.parse_raw_data()
    unsubscribe()
    unsubscribe()
    store.reset()

    assert calls == [State.RAW_LOADED, State.PARSED]


def test_load_archive(make_zip):
    store = DataStore(tz=UTC)
    loading = []
    store.subscribe(lambda s: loading.append(s.is_loading))

    store.load_archive(make_zip({TX_MEMBER: TX_CSV}))

    assert store.state is State.PARSED
    assert store.raw_data == {Channel.TRANSACTIONS: TX_CSV}
    assert store.parsed_data.counts()["transactions"] == 2
    assert loading[0] is True
    assert store.is_loading is False


def test_load_archive_failure_keeps_snapshot(make_zip):
    store = DataStore()
    store.load_archive(make_zip({TX_MEMBER: TX_CSV}))
    good = store.parsed_data

    store.load_archive(make_zip({"Takeout/Maps/x.json": "{}"}))
    assert store.state is State.ERROR
    assert "No Google Pay data" in store.error
    assert store.parsed_data is good

    store.load_archive(b"not a zip")
    assert store.error.startswith("Failed to extract ZIP file")
    assert store.parsed_data is good
    assert store.is_loading is False
