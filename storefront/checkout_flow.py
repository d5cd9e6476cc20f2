"""
Checkout step machine: Shipping -> Payment -> Review -> Submitting -> Completed.

`transition` is the single source of truth for which moves are legal and
which validation gate each forward move must pass. `CheckoutMachine` keeps
the draft and the touched fields around it for the checkout page.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Mapping, Optional

from storefront.errors import IllegalTransition
from storefront.models import CheckoutFormData
from storefront.validation import Scope, validate

logger = logging.getLogger(__name__)

STEP_TITLES = ("Shipping Information", "Payment Details", "Review Order")


class CheckoutState(Enum):
    SHIPPING = 0
    PAYMENT = 1
    REVIEW = 2
    SUBMITTING = 3
    COMPLETED = 4


class CheckoutAction(Enum):
    NEXT = "next"
    BACK = "back"
    SUBMIT = "submit"
    SUBMIT_SUCCEEDED = "submit_succeeded"
    SUBMIT_FAILED = "submit_failed"


@dataclass(frozen=True)
class Transition:
    """
    Outcome of one action: the resulting state, whether the action moved the
    machine, and for a rejected gate the errors and the fields to mark touched.
    """

    state: CheckoutState
    advanced: bool
    errors: Optional[Dict[str, str]] = None
    touched: FrozenSet[str] = frozenset()


# (state, action) -> (target, scope checked before moving, touch the whole scope on failure)
_GATES = {
    (CheckoutState.SHIPPING, CheckoutAction.NEXT): (CheckoutState.PAYMENT, Scope.SHIPPING, True),
    (CheckoutState.PAYMENT, CheckoutAction.NEXT): (CheckoutState.REVIEW, Scope.PAYMENT, True),
    (CheckoutState.REVIEW, CheckoutAction.SUBMIT): (CheckoutState.SUBMITTING, Scope.CHECKOUT, False),
}

_MOVES = {
    (CheckoutState.PAYMENT, CheckoutAction.BACK): CheckoutState.SHIPPING,
    (CheckoutState.REVIEW, CheckoutAction.BACK): CheckoutState.PAYMENT,
    (CheckoutState.SUBMITTING, CheckoutAction.SUBMIT_SUCCEEDED): CheckoutState.COMPLETED,
    (CheckoutState.SUBMITTING, CheckoutAction.SUBMIT_FAILED): CheckoutState.REVIEW,
}

_STEP_SCOPES = {
    CheckoutState.SHIPPING: Scope.SHIPPING,
    CheckoutState.PAYMENT: Scope.PAYMENT,
    CheckoutState.REVIEW: Scope.CHECKOUT,
}


def transition(state: CheckoutState, action: CheckoutAction, draft: Mapping[str, str]) -> Transition:
    """
    Computes the next checkout state.

    Forward moves pass through a validation gate; BACK and the submission
    outcomes move unconditionally. Every other (state, action) pair is illegal,
    which rules out skipping steps and leaving COMPLETED.

    Args:
        state: Current state.
        action: Action requested by the shopper or the submission flow.
        draft: The checkout form values, keyed by field name.

    Returns:
        The Transition describing the outcome.

    Raises:
        IllegalTransition: If the action is not allowed from `state`.
    """
    key = (state, action)
    if key in _GATES:
        target, scope, touch_scope = _GATES[key]
        result = validate(draft, scope)
        if result.valid:
            return Transition(target, True)
        touched = scope.fields if touch_scope else result.errors.keys()
        return Transition(state, False, result.errors, frozenset(touched))
    if key in _MOVES:
        return Transition(_MOVES[key], True)
    raise IllegalTransition(f"Cannot {action.value} from {state.name}")


class CheckoutMachine:
    """
    Holds the checkout draft and drives it through `transition`.

    Errors are only shown for touched fields. A field becomes touched when a
    gate rejects it; from then on every edit re-validates it.
    """

    def __init__(self, draft: Optional[CheckoutFormData] = None):
        self.state = CheckoutState.SHIPPING
        self.draft = draft if draft is not None else CheckoutFormData()
        self.touched = set()

    def dispatch(self, action: CheckoutAction) -> Transition:
        result = transition(self.state, action, self.draft.as_dict())
        if result.state is not self.state:
            logger.debug(f"Checkout {self.state.name} -> {result.state.name} on {action.value}")
        self.state = result.state
        self.touched |= result.touched
        return result

    def next(self) -> Transition:
        return self.dispatch(CheckoutAction.NEXT)

    def back(self) -> Transition:
        return self.dispatch(CheckoutAction.BACK)

    def submit(self) -> Transition:
        return self.dispatch(CheckoutAction.SUBMIT)

    def succeed(self) -> Transition:
        return self.dispatch(CheckoutAction.SUBMIT_SUCCEEDED)

    def fail(self) -> Transition:
        return self.dispatch(CheckoutAction.SUBMIT_FAILED)

    def update_field(self, name: str, value: str) -> None:
        if self.state in (CheckoutState.SUBMITTING, CheckoutState.COMPLETED):
            raise IllegalTransition(f"Cannot edit the form while {self.state.name}")
        self.draft.update(**{name: value})

    @property
    def visible_errors(self) -> Dict[str, str]:
        errors = validate(self.draft.as_dict(), Scope.CHECKOUT).errors
        return {name: message for name, message in errors.items() if name in self.touched}

    @property
    def active_step(self) -> int:
        """Stepper index: 0-2 for the form steps, 3 once the order is placed."""
        if self.state is CheckoutState.SUBMITTING:
            return CheckoutState.REVIEW.value
        if self.state is CheckoutState.COMPLETED:
            return len(STEP_TITLES)
        return self.state.value

    @property
    def in_flight(self) -> bool:
        return self.state is CheckoutState.SUBMITTING

    @property
    def completed(self) -> bool:
        return self.state is CheckoutState.COMPLETED

    @property
    def can_advance(self) -> bool:
        scope = _STEP_SCOPES.get(self.state)
        if scope is None:
            return False
        return validate(self.draft.as_dict(), scope).valid

    @property
    def forward_label(self) -> Optional[str]:
        """Caption of the forward control, or None once the order is placed and the control is gone."""
        if self.state is CheckoutState.COMPLETED:
            return None
        if self.state is CheckoutState.SUBMITTING:
            return "Processing..."
        if self.state is CheckoutState.REVIEW:
            return "Place Order"
        return "Next"

    @property
    def forward_enabled(self) -> bool:
        return self.can_advance

    @property
    def back_enabled(self) -> bool:
        return self.state in (CheckoutState.PAYMENT, CheckoutState.REVIEW)
