"""Toggle the viewer's subscription to an issue, pull request or discussion by URL."""

from . import gh
from .errors import FatalError
from .log import get_logger

# https://docs.github.com/en/graphql/reference/queries#resource
SUBSCRIBABLE_QUERY = """\
query ($url_input: URI!) {
  resource(url: $url_input) {
    ... on Subscribable { id viewerSubscription viewerCanSubscribe }
  }
}"""

# https://docs.github.com/en/graphql/reference/mutations#updatesubscription
UPDATE_SUBSCRIPTION_MUTATION = """\
mutation ($node_id: ID!, $state: SubscriptionState!) {
  updateSubscription(input: {subscribableId: $node_id, state: $state}) {
    subscribable { viewerSubscription }
  }
}"""

SUBSCRIBED = "SUBSCRIBED"
UNSUBSCRIBED = "UNSUBSCRIBED"
IGNORED = "IGNORED"

_log = get_logger("subscription")


def next_state(current: str) -> str:
    """The state a toggle moves to. IGNORED counts as not subscribed."""
    if current == SUBSCRIBED:
        return UNSUBSCRIBED
    if current in (UNSUBSCRIBED, IGNORED):
        return SUBSCRIBED
    raise FatalError(f"Unknown subscription state: {current!r}")


def toggle_subscription(url: str) -> str:
    """Flip the viewer's subscription for url and return the new state."""
    try:
        data = gh.graphql(SUBSCRIBABLE_QUERY, {"url_input": url})
    except FatalError as e:
        raise FatalError(f"Your input appears to be an invalid URL: '{url}'.") from e

    resource = data.get("resource") or {}
    if not resource.get("id"):
        raise FatalError(f"Your input appears to be an invalid URL: '{url}'.")
    if resource.get("viewerCanSubscribe") is not True:
        raise FatalError(f"You are unable to subscribe to this item: '{url}'.")

    state = next_state(resource.get("viewerSubscription") or "")

    try:
        result = gh.graphql(
            UPDATE_SUBSCRIPTION_MUTATION, {"node_id": resource["id"], "state": state}
        )
    except FatalError as e:
        raise FatalError(f"Failed to update the subscription of '{url}': {e}") from e

    new_state = (
        ((result.get("updateSubscription") or {}).get("subscribable") or {}).get(
            "viewerSubscription"
        )
        or state
    )
    _log.info("subscription: %s -> %s", url, new_state)
    return new_state
