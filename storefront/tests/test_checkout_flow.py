import pytest
from storefront.checkout_flow import (
    CheckoutAction, CheckoutMachine, CheckoutState, STEP_TITLES, transition,
)
from storefront.errors import IllegalTransition
from factories import VALID_CHECKOUT, VALID_PAYMENT, VALID_SHIPPING, fill

S = CheckoutState
A = CheckoutAction


# --- transition() ---

def test_shipping_next_advances_when_valid():
    t = transition(S.SHIPPING, A.NEXT, VALID_SHIPPING)
    assert t.state is S.PAYMENT
    assert t.advanced
    assert t.errors is None


def test_shipping_next_stays_and_touches_whole_step():
    t = transition(S.SHIPPING, A.NEXT, {**VALID_SHIPPING, "zip_code": "1234"})
    assert t.state is S.SHIPPING
    assert not t.advanced
    assert t.errors == {"zip_code": "Enter a valid ZIP code"}
    assert t.touched == {"name", "email", "address", "city", "zip_code"}


def test_payment_next_checks_only_payment():
    t = transition(S.PAYMENT, A.NEXT, VALID_PAYMENT)
    assert t.state is S.REVIEW


def test_payment_next_rejects_bad_card():
    t = transition(S.PAYMENT, A.NEXT, {**VALID_PAYMENT, "card_number": "123"})
    assert t.state is S.PAYMENT
    assert t.touched == {"card_number", "card_expiry", "card_cvv"}


@pytest.mark.parametrize("state,target", [(S.PAYMENT, S.SHIPPING), (S.REVIEW, S.PAYMENT)])
def test_back_skips_validation(state, target):
    t = transition(state, A.BACK, {})
    assert t.state is target
    assert t.advanced


def test_submit_from_review_with_valid_draft():
    assert transition(S.REVIEW, A.SUBMIT, VALID_CHECKOUT).state is S.SUBMITTING


def test_submit_touches_only_invalid_fields():
    t = transition(S.REVIEW, A.SUBMIT, {**VALID_CHECKOUT, "email": "nope"})
    assert t.state is S.REVIEW
    assert t.touched == {"email"}


def test_submission_outcomes():
    assert transition(S.SUBMITTING, A.SUBMIT_SUCCEEDED, {}).state is S.COMPLETED
    assert transition(S.SUBMITTING, A.SUBMIT_FAILED, {}).state is S.REVIEW


@pytest.mark.parametrize("state,action", [
    (S.SHIPPING, A.BACK),
    (S.SHIPPING, A.SUBMIT),
    (S.PAYMENT, A.SUBMIT),
    (S.REVIEW, A.NEXT),
    (S.SUBMITTING, A.SUBMIT),
    (S.SUBMITTING, A.BACK),
    (S.COMPLETED, A.BACK),
    (S.COMPLETED, A.NEXT),
    (S.COMPLETED, A.SUBMIT),
    (S.REVIEW, A.SUBMIT_SUCCEEDED),
])
def test_illegal_pairs_raise(state, action):
    with pytest.raises(IllegalTransition):
        transition(state, action, VALID_CHECKOUT)


# --- CheckoutMachine ---

def test_machine_starts_on_shipping():
    machine = CheckoutMachine()
    assert machine.state is S.SHIPPING
    assert machine.active_step == 0
    assert machine.visible_errors == {}
    assert machine.forward_label == "Next"
    assert not machine.back_enabled


def test_errors_hidden_until_gate_rejects():
    machine = CheckoutMachine()
    machine.update_field("zip_code", "1")
    assert machine.visible_errors == {}

    machine.next()
    assert machine.state is S.SHIPPING
    assert machine.visible_errors["zip_code"] == "Enter a valid ZIP code"
    assert machine.visible_errors["name"] == "Name is required"
    assert "card_number" not in machine.visible_errors


def test_touched_field_revalidates_on_edit():
    machine = CheckoutMachine()
    machine.next()
    machine.update_field("name", "Ada")
    assert "name" not in machine.visible_errors
    machine.update_field("name", "")
    assert machine.visible_errors["name"] == "Name is required"


def test_full_walk_to_completed():
    machine = CheckoutMachine()
    fill(machine)
    assert machine.next().advanced
    assert machine.next().advanced
    assert machine.state is S.REVIEW
    assert machine.forward_label == "Place Order"

    machine.submit()
    assert machine.in_flight
    assert machine.forward_label == "Processing..."
    assert not machine.forward_enabled
    assert machine.active_step == 2

    machine.succeed()
    assert machine.completed
    assert machine.active_step == len(STEP_TITLES)
    assert machine.forward_label is None
    assert not machine.forward_enabled


def test_back_keeps_draft():
    machine = CheckoutMachine()
    fill(machine)
    machine.next()
    machine.back()
    assert machine.state is S.SHIPPING
    assert machine.draft.as_dict() == VALID_CHECKOUT


def test_tampered_draft_rejected_at_submit():
    machine = CheckoutMachine()
    fill(machine)
    machine.next()
    machine.next()
    machine.update_field("card_number", "123")

    t = machine.submit()
    assert machine.state is S.REVIEW
    assert not t.advanced
    assert machine.visible_errors == {"card_number": "Card number must be 16 digits"}


def test_failed_submission_returns_to_review():
    machine = CheckoutMachine()
    fill(machine)
    machine.next()
    machine.next()
    machine.submit()
    machine.fail()
    assert machine.state is S.REVIEW
    assert not machine.in_flight
    assert machine.draft.card_number == VALID_CHECKOUT["card_number"]


def test_can_advance_tracks_current_step():
    machine = CheckoutMachine()
    assert not machine.can_advance
    fill(machine, VALID_SHIPPING)
    assert machine.can_advance
    machine.next()
    assert not machine.can_advance
    fill(machine, VALID_PAYMENT)
    assert machine.can_advance


def test_editing_while_submitting_is_illegal():
    machine = CheckoutMachine()
    fill(machine)
    machine.next()
    machine.next()
    machine.submit()
    with pytest.raises(IllegalTransition):
        machine.update_field("name", "Eve")


def test_unknown_field_rejected():
    with pytest.raises(KeyError):
        CheckoutMachine().update_field("phone", "555")
