from __future__ import annotations

import logging
import sys
from typing import Any, Dict, Mapping, Optional

from travtrack import env
from travtrack.registries.storage import CampaignStores, get_stores
from travtrack.services.ammo_actions import AmmoActions
from travtrack.services.collection_actions import CollectionActions
from travtrack.services.sync_outbox import SyncOutbox
from travtrack.state.manager import StateManager
from travtrack.ui.feedback import FeedbackBus

LOG = logging.getLogger(__name__)


def build_context(stores: Optional[CampaignStores] = None) -> Dict[str, Any]:
    """Build the application context.

    Collaborators are created once here and handed to whoever needs them;
    nothing else reaches for module-level singletons. Tests pass their own
    ``stores``.
    """

    if stores is None:
        stores = get_stores()
    characters = env.get_character_names()
    campaign_id = env.get_campaign_id()

    state_manager = StateManager(
        stores.snapshot,
        characters=characters,
        autosave_interval=env.autosave_interval(),
    )
    if state_manager.created:
        LOG.info("Starting a new campaign snapshot")
        state_manager.persist()

    outbox = SyncOutbox(
        stores.repository,
        slot=stores.snapshot,
        max_attempts=env.sync_max_attempts(),
    )
    if len(outbox):
        LOG.info("%d remote writes pending from a previous session", len(outbox))

    ctx: Dict[str, Any] = {
        "feedback_bus": FeedbackBus(),
        "stores": stores,
        "state_manager": state_manager,
        "outbox": outbox,
        "ammo": AmmoActions(state_manager, outbox, campaign_id=campaign_id),
        "collections": CollectionActions(state_manager, outbox, campaign_id=campaign_id),
        "campaign_id": campaign_id,
        "characters": characters,
    }
    return ctx


def flush_feedback(ctx: Dict[str, Any]) -> None:
    events = ctx["feedback_bus"].drain()
    for ev in events:
        kind = ev.get("kind", "") if isinstance(ev, Mapping) else ""
        text = ev.get("text", "") if isinstance(ev, Mapping) else str(ev)
        stream = sys.stderr if kind in {"SYSTEM/WARN", "SYSTEM/ERROR"} else sys.stdout
        print(text, file=stream)
