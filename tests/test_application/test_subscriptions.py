"""Tests for subscription derived views, draft validation and use cases."""
from datetime import timedelta
from decimal import Decimal

import pytest

from app.application.store import SubscriptionStore
from app.application.subscriptions import (
    ALL_CATEGORIES,
    filter_subscriptions, compute_totals, sort_by_renewal, category_options, subscription_card,
    build_draft, SubscriptionValidationError, ValidationError,
    LoadSubscriptionsUseCase, SaveSubscriptionUseCase, DeleteSubscriptionUseCase,
)
from app.domain.subscription import SubscriptionStatus
from app.infrastructure.errors import NetworkError, NotFoundError, ServerError
from tests.conftest import make_subscription, TODAY


@pytest.fixture
def subs():
    return [
        make_subscription(id=1, name="Netflix", category="Entertainment"),
        make_subscription(id=2, name="Spotify", category="Music", cost="9.99"),
        make_subscription(id=3, name="Figma", category="Design", cost="12"),
        make_subscription(id=4, name="Xbox Game Pass", category="Gaming", cost="14.99"),
    ]


# ======================================================================
# filter_subscriptions
# ======================================================================

class TestFilterSubscriptions:
    def test_identity_without_filters(self, subs):
        assert filter_subscriptions(subs, "", ALL_CATEGORIES) == subs

    def test_none_means_no_filter(self, subs):
        assert filter_subscriptions(subs, None, None) == subs

    def test_empty_input(self):
        assert filter_subscriptions([], "net", "Music") == []

    def test_search_is_case_insensitive(self):
        netflix = [make_subscription(name="Netflix")]
        assert filter_subscriptions(netflix, "NET", ALL_CATEGORIES) == netflix
        assert filter_subscriptions(netflix, "xyz", ALL_CATEGORIES) == []

    def test_search_matches_category(self, subs):
        result = filter_subscriptions(subs, "gam", ALL_CATEGORIES)
        assert [s.id for s in result] == [4]

    def test_search_matches_category_substring(self, subs):
        # "music" is in the category of Spotify only
        assert [s.id for s in filter_subscriptions(subs, "MUSIC", ALL_CATEGORIES)] == [2]

    def test_whitespace_search_is_literal(self, subs):
        # only "Xbox Game Pass" contains a space
        assert [s.id for s in filter_subscriptions(subs, " ", ALL_CATEGORIES)] == [4]
        assert filter_subscriptions(subs, "  ", ALL_CATEGORIES) == []

    def test_category_exact_match(self, subs):
        result = filter_subscriptions(subs, "", "Design")
        assert [s.id for s in result] == [3]
        assert all(s.category == "Design" for s in result)

    def test_category_is_case_sensitive(self, subs):
        assert filter_subscriptions(subs, "", "design") == []

    def test_unknown_category_is_matched_literally(self):
        spanish = [make_subscription(id=1, category="Musica"), make_subscription(id=2, category="Music")]
        assert [s.id for s in filter_subscriptions(spanish, "", "Musica")] == [1]

    def test_search_and_category_combined(self, subs):
        assert filter_subscriptions(subs, "net", "Music") == []
        assert [s.id for s in filter_subscriptions(subs, "spot", "Music")] == [2]

    def test_order_preserved_and_input_untouched(self, subs):
        original = list(subs)
        result = filter_subscriptions(subs, "f", ALL_CATEGORIES)
        assert [s.id for s in result] == [1, 2, 3]
        assert subs == original
        assert result is not subs


# ======================================================================
# compute_totals
# ======================================================================

class TestComputeTotals:
    def test_empty(self):
        totals = compute_totals([], TODAY)
        assert totals.monthly_cost == 0
        assert totals.yearly_cost == 0
        assert totals.upcoming_renewal_count == 0

    def test_only_active_counted(self):
        totals = compute_totals([
            make_subscription(cost="10", status="active", renewal_date=TODAY + timedelta(days=30)),
            make_subscription(cost="5", status="cancelled", renewal_date=TODAY + timedelta(days=2)),
        ], TODAY)
        assert totals.monthly_cost == Decimal("10")
        assert totals.yearly_cost == Decimal("120")
        assert totals.upcoming_renewal_count == 0

    def test_end_to_end_scenario(self):
        totals = compute_totals([
            make_subscription(name="Spotify", cost="9.99", status="active",
                              renewal_date=TODAY + timedelta(days=3), category="Musica"),
            make_subscription(name="Adobe", cost="52.99", status="inactive",
                              renewal_date=TODAY + timedelta(days=2), category="Diseño"),
        ], TODAY)
        assert totals.monthly_cost == Decimal("9.99")
        assert totals.yearly_cost == Decimal("119.88")
        assert totals.upcoming_renewal_count == 1

    def test_upcoming_window(self):
        totals = compute_totals([
            make_subscription(renewal_date=TODAY),
            make_subscription(renewal_date=TODAY + timedelta(days=1)),
            make_subscription(renewal_date=TODAY + timedelta(days=7)),
            make_subscription(renewal_date=TODAY + timedelta(days=8)),
            make_subscription(renewal_date=TODAY - timedelta(days=1)),
        ], TODAY)
        assert totals.upcoming_renewal_count == 2

    def test_decimal_sum_is_exact(self):
        totals = compute_totals([make_subscription(cost="0.1") for _ in range(3)], TODAY)
        assert totals.monthly_cost == Decimal("0.3")
        assert totals.yearly_cost == Decimal("3.6")


class TestHelpers:
    def test_category_options_starts_with_all(self):
        options = category_options()
        assert options[0] == ALL_CATEGORIES
        assert "Other" in options

    def test_sort_by_renewal_is_stable(self):
        a = make_subscription(id=1, renewal_date=TODAY + timedelta(days=5))
        b = make_subscription(id=2, renewal_date=TODAY + timedelta(days=1))
        c = make_subscription(id=3, renewal_date=TODAY + timedelta(days=5))
        assert [s.id for s in sort_by_renewal([a, b, c])] == [2, 1, 3]

    def test_subscription_card(self):
        card = subscription_card(
            make_subscription(id=7, category="Musica", renewal_date=TODAY + timedelta(days=3)), TODAY,
        )
        assert card["category"] == "Musica"
        assert card["category_kind"] == "Other"
        assert card["days_left"] == 3
        assert card["expiring_soon"] is True


# ======================================================================
# build_draft
# ======================================================================

class TestBuildDraft:
    def _build(self, **overrides):
        data = dict(
            user_id=1, name="  Netflix ", cost="15,99", category="Entertainment",
            renewal_date="2026-04-01", status="active", description="",
        )
        data.update(overrides)
        return build_draft(**data)

    def test_valid(self):
        draft = self._build()
        assert draft.is_draft
        assert draft.name == "Netflix"
        assert draft.cost == Decimal("15.99")
        assert draft.status is SubscriptionStatus.ACTIVE
        assert draft.description is None

    def test_zero_cost_allowed(self):
        assert self._build(cost="0").cost == Decimal("0")

    @pytest.mark.parametrize("overrides, message", [
        ({"name": "   "}, "Name is required"),
        ({"cost": "-5"}, "Cost: Amount cannot be negative"),
        ({"cost": "abc"}, "Cost"),
        ({"cost": "1.999"}, "decimal places"),
        ({"category": "Musica"}, "Unknown category"),
        ({"status": "paused"}, "Unknown status"),
        ({"renewal_date": ""}, "Renewal date"),
    ])
    def test_invalid(self, overrides, message):
        with pytest.raises(SubscriptionValidationError, match=message):
            self._build(**overrides)

    def test_stored_category_is_accepted(self):
        draft = self._build(category="Musica", stored_category="Musica")
        assert draft.category == "Musica"

    def test_other_unknown_category_still_rejected_on_edit(self):
        with pytest.raises(SubscriptionValidationError, match="Unknown category"):
            self._build(category="Deportes", stored_category="Musica")

    def test_validation_error_hierarchy(self):
        assert issubclass(SubscriptionValidationError, ValidationError)
        assert issubclass(ValidationError, ValueError)


# ======================================================================
# Use cases
# ======================================================================

FORM = {
    "name": "Disney+", "cost": "7.99", "category": "Entertainment",
    "renewal_date": "2026-03-15", "status": "active", "description": "",
}


@pytest.fixture
def store(sample_user_id):
    return SubscriptionStore(sample_user_id)


class TestLoadSubscriptions:
    def test_load(self, fake_gateway, store):
        fake_gateway.add(make_subscription(id=1, user_id=1))
        fake_gateway.add(make_subscription(id=2, user_id=2))
        LoadSubscriptionsUseCase(fake_gateway, store).execute()
        assert store.is_loaded
        assert [s.id for s in store.items] == [1]
        assert store.load_error is None

    def test_failure_empties_store(self, fake_gateway, store, network_error):
        store.replace_all([make_subscription(id=1)])
        fake_gateway.fail_with = network_error
        with pytest.raises(NetworkError):
            LoadSubscriptionsUseCase(fake_gateway, store).execute()
        assert store.items == ()
        assert store.is_loaded
        assert store.load_error is network_error


class TestSaveSubscription:
    def test_create(self, fake_gateway, store):
        saved = SaveSubscriptionUseCase(fake_gateway, store).execute(FORM)
        assert saved.id is not None
        assert store.items == (saved,)
        assert fake_gateway.subscriptions[saved.id].user_id == 1

    def test_validation_happens_before_gateway(self, fake_gateway, store):
        with pytest.raises(SubscriptionValidationError):
            SaveSubscriptionUseCase(fake_gateway, store).execute({**FORM, "cost": "-1"})
        assert fake_gateway.calls == []
        assert store.items == ()

    def test_update_replaces_in_place(self, fake_gateway, store):
        first = fake_gateway.add(make_subscription(id=1, name="A"))
        second = fake_gateway.add(make_subscription(id=2, name="B"))
        store.replace_all([first, second])

        saved = SaveSubscriptionUseCase(fake_gateway, store).execute({**FORM, "name": "A2"}, subscription_id=1)
        assert saved.name == "A2"
        assert [s.name for s in store.items] == ["A2", "B"]

    def test_update_keeps_owner(self, fake_gateway):
        other_owner = fake_gateway.add(make_subscription(id=1, user_id=9))
        store = SubscriptionStore(9)
        store.replace_all([other_owner])
        saved = SaveSubscriptionUseCase(fake_gateway, store).execute(FORM, subscription_id=1)
        assert saved.user_id == 9

    def test_update_keeps_legacy_category(self, fake_gateway, store):
        legacy = fake_gateway.add(make_subscription(id=1, name="Spotify", category="Musica"))
        store.replace_all([legacy])
        saved = SaveSubscriptionUseCase(fake_gateway, store).execute(
            {**FORM, "name": "Spotify Duo", "category": "Musica"}, subscription_id=1,
        )
        assert saved.category == "Musica"
        assert fake_gateway.subscriptions[1].category == "Musica"
        assert store.get(1).category == "Musica"

    def test_update_can_move_legacy_to_standard_category(self, fake_gateway, store):
        legacy = fake_gateway.add(make_subscription(id=1, category="Musica"))
        store.replace_all([legacy])
        saved = SaveSubscriptionUseCase(fake_gateway, store).execute(
            {**FORM, "category": "Music"}, subscription_id=1,
        )
        assert saved.category == "Music"

    def test_update_missing_target(self, fake_gateway, store):
        with pytest.raises(NotFoundError):
            SaveSubscriptionUseCase(fake_gateway, store).execute(FORM, subscription_id=42)
        assert store.items == ()

    def test_gateway_failure_leaves_store_unchanged(self, fake_gateway, store):
        existing = fake_gateway.add(make_subscription(id=1))
        store.replace_all([existing])
        fake_gateway.fail_with = ServerError("HTTP 500", status_code=500)
        with pytest.raises(ServerError):
            SaveSubscriptionUseCase(fake_gateway, store).execute({**FORM, "name": "Changed"}, subscription_id=1)
        assert store.items == (existing,)


class TestDeleteSubscription:
    def test_delete_keeps_order_of_others(self, fake_gateway, store):
        items = [fake_gateway.add(make_subscription(id=i, name=f"S{i}")) for i in (1, 2, 3, 4)]
        store.replace_all(items)
        DeleteSubscriptionUseCase(fake_gateway, store).execute(2)
        assert [s.id for s in store.items] == [1, 3, 4]
        assert 2 not in fake_gateway.subscriptions

    def test_failed_delete_keeps_record(self, fake_gateway, store, network_error):
        item = fake_gateway.add(make_subscription(id=1))
        store.replace_all([item])
        fake_gateway.fail_with = network_error
        with pytest.raises(NetworkError):
            DeleteSubscriptionUseCase(fake_gateway, store).execute(1)
        assert store.items == (item,)
