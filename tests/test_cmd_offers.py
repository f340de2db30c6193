"""CLI tests for offers command group."""
import json
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from ebay_listings.commands.offers_cmd import app
from ebay_listings.models.offers import PolicyTriple
from ebay_listings.utils.errors import ApiError, OfferCreationError

runner = CliRunner()


@pytest.fixture
def stack():
    s = MagicMock()
    s.policies.resolve.return_value = PolicyTriple(
        shipping_policy_id="sbx-ship", payment_policy_id="sbx-pay", return_policy_id="sbx-ret"
    )
    return s


@pytest.fixture
def offer_file(tmp_path, sample_offer):
    path = tmp_path / "offer.json"
    path.write_text(json.dumps(sample_offer.model_dump(mode="json")))
    return str(path)


# ── list ─────────────────────────────────────────────────────────────

def test_list_offers(stack, sample_offer):
    stack.offers.get_active_offers.return_value = [sample_offer.model_copy(update={"listing_id": "L1"})]

    with patch("ebay_listings.commands.offers_cmd._build_stack", return_value=stack):
        result = runner.invoke(app, ["list", "--output", "json"])
    assert result.exit_code == 0
    assert "Vintage Camera" in result.output
    stack.offers.get_active_offers.assert_called_once_with(100, 1)
    stack.close.assert_called_once()


def test_list_offers_paged(stack):
    stack.offers.get_active_offers.return_value = []

    with patch("ebay_listings.commands.offers_cmd._build_stack", return_value=stack):
        result = runner.invoke(app, ["list", "--page-size", "20", "--page", "2"])
    assert result.exit_code == 0
    stack.offers.get_active_offers.assert_called_once_with(20, 2)


def test_list_rejects_page_zero(stack):
    with patch("ebay_listings.commands.offers_cmd._build_stack", return_value=stack) as build:
        result = runner.invoke(app, ["list", "--page", "0"])
    assert result.exit_code == 2
    build.assert_not_called()


def test_list_all_pages(stack):
    stack.offers.get_all_active_offers.return_value = []

    with patch("ebay_listings.commands.offers_cmd._build_stack", return_value=stack):
        result = runner.invoke(app, ["list", "--all"])
    assert result.exit_code == 0
    stack.offers.get_all_active_offers.assert_called_once_with(100)


def test_list_api_error(stack):
    stack.offers.get_active_offers.side_effect = ApiError(500, "Internal error")

    with patch("ebay_listings.commands.offers_cmd._build_stack", return_value=stack):
        result = runner.invoke(app, ["list"])
    assert result.exit_code == 1
    stack.close.assert_called_once()


def test_list_non_json_reply_reports_structured_error(stack):
    stack.offers.get_active_offers.side_effect = ApiError(200, "<html>gateway</html>", "GET", "sell/inventory/v1/inventory_item")

    with patch("ebay_listings.commands.offers_cmd._build_stack", return_value=stack):
        result = runner.invoke(app, ["list", "--env", "sandbox"])
    assert result.exit_code == 1
    assert '"error": true' in result.output
    assert result.exception is None or isinstance(result.exception, SystemExit)


# ── get ──────────────────────────────────────────────────────────────

def test_get_offer(stack, sample_offer):
    stack.offers.get_offer.return_value = sample_offer

    with patch("ebay_listings.commands.offers_cmd._build_stack", return_value=stack):
        result = runner.invoke(app, ["get", "--listing-id", "L1", "--output", "json"])
    assert result.exit_code == 0
    assert "129.99" in result.output


def test_get_offer_not_found(stack):
    stack.offers.get_offer.return_value = None

    with patch("ebay_listings.commands.offers_cmd._build_stack", return_value=stack):
        result = runner.invoke(app, ["get", "--listing-id", "nope"])
    assert result.exit_code == 1
    assert "No offer found" in result.output


# ── create ───────────────────────────────────────────────────────────

def test_create_resolves_policies(stack, offer_file):
    stack.offers.create_offer.return_value = "L-new"

    with patch("ebay_listings.commands.offers_cmd._build_stack", return_value=stack):
        result = runner.invoke(app, ["create", "--file", offer_file, "--output", "json"])
    assert result.exit_code == 0
    assert "L-new" in result.output
    created = stack.offers.create_offer.call_args[0][0]
    assert created.shipping_policy_id == "sbx-ship"


def test_create_keep_policies(stack, offer_file):
    stack.offers.create_offer.return_value = "L-new"

    with patch("ebay_listings.commands.offers_cmd._build_stack", return_value=stack):
        result = runner.invoke(app, ["create", "--file", offer_file, "--keep-policies"])
    assert result.exit_code == 0
    stack.policies.resolve.assert_not_called()
    assert stack.offers.create_offer.call_args[0][0].shipping_policy_id == "ship-1"


def test_create_dry_run(stack, offer_file):
    with patch("ebay_listings.commands.offers_cmd._build_stack", return_value=stack) as build:
        result = runner.invoke(app, ["create", "--file", offer_file, "--dry-run"])
    assert result.exit_code == 0
    assert "DRY RUN" in result.output
    build.assert_not_called()


def test_create_invalid_file(stack, tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text('{"title": "missing price"}')

    with patch("ebay_listings.commands.offers_cmd._build_stack", return_value=stack) as build:
        result = runner.invoke(app, ["create", "--file", str(bad)])
    assert result.exit_code == 1
    build.assert_not_called()


def test_create_failure_reports_error(stack, offer_file):
    stack.offers.create_offer.side_effect = OfferCreationError(
        "publish", "sku-1", ApiError(400, "Missing category")
    )

    with patch("ebay_listings.commands.offers_cmd._build_stack", return_value=stack):
        result = runner.invoke(app, ["create", "--file", offer_file])
    assert result.exit_code == 1
    assert "publish" in result.output


# ── update / delete ──────────────────────────────────────────────────

def test_update_offer(stack, offer_file):
    stack.offers.update_offer.return_value = True

    with patch("ebay_listings.commands.offers_cmd._build_stack", return_value=stack):
        result = runner.invoke(app, ["update", "--listing-id", "L1", "--file", offer_file, "--output", "json"])
    assert result.exit_code == 0
    assert "updated" in result.output
    assert stack.offers.update_offer.call_args[0][0] == "L1"


def test_update_not_found(stack, offer_file):
    stack.offers.update_offer.return_value = False

    with patch("ebay_listings.commands.offers_cmd._build_stack", return_value=stack):
        result = runner.invoke(app, ["update", "--listing-id", "L1", "--file", offer_file])
    assert result.exit_code == 1


def test_delete_offer(stack):
    stack.offers.delete_offer.return_value = True

    with patch("ebay_listings.commands.offers_cmd._build_stack", return_value=stack):
        result = runner.invoke(app, ["delete", "--listing-id", "L1", "--output", "json"])
    assert result.exit_code == 0
    assert "deleted" in result.output
    stack.offers.delete_offer.assert_called_once_with("L1")


def test_delete_not_found(stack):
    stack.offers.delete_offer.return_value = False

    with patch("ebay_listings.commands.offers_cmd._build_stack", return_value=stack):
        result = runner.invoke(app, ["delete", "--listing-id", "nonexistent"])
    assert result.exit_code == 1
    stack.close.assert_called_once()


def test_delete_dry_run(stack):
    with patch("ebay_listings.commands.offers_cmd._build_stack", return_value=stack) as build:
        result = runner.invoke(app, ["delete", "--listing-id", "L1", "--dry-run"])
    assert result.exit_code == 0
    build.assert_not_called()
