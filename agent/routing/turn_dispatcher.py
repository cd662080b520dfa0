"""
Turn Dispatcher - Entry point for one chat turn.

State machine over context.processing_stage:

    initial (or missing) → Coordinator, then its NextAction in the same turn
    query                → QueryResponder with context.query_params
    booking              → BookingResponder with context.booking_params
    generic / unknown    → GenericResponder (completion provider)

Both the stage and the action dispatch are enum-keyed tables. Every branch
ends in ResponseValidator. The returned Response carries the combined
context patch; the caller persists merge_context(context, response.context).
The incoming context is never modified.
"""

import logging
from collections.abc import Awaitable, Callable

from agent.models import ActionType, NextAction, ProcessingStage, Response
from agent.responders.booking import BookingResponder
from agent.responders.generic import GenericResponder
from agent.responders.query import QueryResponder
from agent.routing.coordinator import Coordinator
from agent.state.helpers import merge_context
from agent.state.schemas import ConversationContext, HistoryTurn
from agent.validators.response_validator import ResponseValidator

logger = logging.getLogger(__name__)

RESPOND_DEFAULT_MESSAGE = (
    "Entiendo tu consulta. ¿Puedes darme más detalles para ayudarte mejor?"
)
UNKNOWN_ACTION_MESSAGE = (
    "No he podido determinar cómo procesar tu consulta. "
    "¿Podrías reformularla o ser más específico?"
)
UNKNOWN_ACTION_QUESTIONS: tuple[str, ...] = (
    "¿Qué puedo hacer en Samaná?",
    "¿Dónde puedo alojarme en Samaná?",
    "¿Cuáles son los mejores restaurantes en Samaná?",
)

StageHandler = Callable[[str, list[HistoryTurn], ConversationContext], Awaitable[Response]]


def resolve_stage(context: ConversationContext | None) -> ProcessingStage:
    """Missing stage → INITIAL; unrecognized stage → GENERIC."""
    raw = (context or {}).get("processing_stage")
    if not raw:
        return ProcessingStage.INITIAL
    try:
        return ProcessingStage(raw)
    except ValueError:
        logger.warning(f"Unknown processing stage, using generic path | stage={raw}")
        return ProcessingStage.GENERIC


class TurnDispatcher:
    """
    Runs one turn through the pipeline.

    All collaborators are stateless and injected once.
    """

    def __init__(
        self,
        coordinator: Coordinator,
        query_responder: QueryResponder,
        booking_responder: BookingResponder,
        generic_responder: GenericResponder,
        validator: ResponseValidator | None = None,
    ):
        self.coordinator = coordinator
        self.query_responder = query_responder
        self.booking_responder = booking_responder
        self.generic_responder = generic_responder
        self.validator = validator or ResponseValidator()

        self._stage_handlers: dict[ProcessingStage, StageHandler] = {
            ProcessingStage.INITIAL: self._initial_stage,
            ProcessingStage.QUERY: self._query_stage,
            ProcessingStage.BOOKING: self._booking_stage,
            ProcessingStage.GENERIC: self._generic_stage,
        }
        self._action_handlers: dict[
            ActionType,
            Callable[[NextAction, str, list[HistoryTurn], ConversationContext], Awaitable[Response]],
        ] = {
            ActionType.QUERY: self._query_action,
            ActionType.BOOKING: self._booking_action,
            ActionType.RESPOND: self._respond_action,
        }

    async def process(
        self,
        message: str,
        history: list[HistoryTurn] | None = None,
        context: ConversationContext | None = None,
    ) -> Response:
        """
        Process one user message.

        Args:
            message: User message
            history: Previous turns, oldest first
            context: Persisted conversation context (not modified)

        Returns:
            Validated Response; `context` holds the patch to persist
        """
        context = dict(context or {})  # type: ignore[assignment]
        stage = resolve_stage(context)
        logger.info(f"Dispatching turn | stage={stage.value}")

        handler = self._stage_handlers[stage]
        return await handler(message, list(history or []), context)

    # ========================================================================
    # Stages
    # ========================================================================

    async def _initial_stage(
        self, message: str, history: list[HistoryTurn], context: ConversationContext
    ) -> Response:
        routed = self.coordinator.route(message, history, context)
        if routed.error:
            return self._finish(routed, message, context)

        turn_context = merge_context(context, routed.context)
        if routed.next_action is None:
            return self._finish(routed, message, turn_context)

        action = routed.next_action
        handler = self._action_handlers.get(action.type)
        if handler is None:
            logger.warning(f"Unrecognized next action | type={action.type}")
            return self._finish(self._unknown_action_response(), message, turn_context)

        response = await handler(action, message, history, turn_context)
        if not response.error:
            response.context = merge_context(routed.context, response.context)
        return self._finish(response, message, merge_context(turn_context, response.context))

    async def _query_stage(
        self, message: str, history: list[HistoryTurn], context: ConversationContext
    ) -> Response:
        response = await self.query_responder.respond(
            context.get("query_params") or {}, message, history, context
        )
        return self._finish(response, message, merge_context(context, response.context))

    async def _booking_stage(
        self, message: str, history: list[HistoryTurn], context: ConversationContext
    ) -> Response:
        response = await self.booking_responder.respond(
            context.get("booking_params") or {}, message, history, context
        )
        return self._finish(response, message, merge_context(context, response.context))

    async def _generic_stage(
        self, message: str, history: list[HistoryTurn], context: ConversationContext
    ) -> Response:
        response = await self.generic_responder.respond(None, message, history, context)
        return self._finish(response, message, merge_context(context, response.context))

    # ========================================================================
    # Next actions (same turn as the Coordinator)
    # ========================================================================

    async def _query_action(
        self, action: NextAction, message: str, history: list[HistoryTurn], context: ConversationContext
    ) -> Response:
        stage_patch = {
            "processing_stage": ProcessingStage.QUERY.value,
            "query_params": dict(action.params),
        }
        response = await self.query_responder.respond(
            dict(action.params), message, history, merge_context(context, stage_patch)
        )
        response.context = merge_context(stage_patch, response.context)
        return response

    async def _booking_action(
        self, action: NextAction, message: str, history: list[HistoryTurn], context: ConversationContext
    ) -> Response:
        stage_patch = {
            "processing_stage": ProcessingStage.BOOKING.value,
            "booking_params": dict(action.params),
        }
        response = await self.booking_responder.respond(
            dict(action.params), message, history, merge_context(context, stage_patch)
        )
        response.context = merge_context(stage_patch, response.context)
        return response

    async def _respond_action(
        self, action: NextAction, message: str, history: list[HistoryTurn], context: ConversationContext
    ) -> Response:
        return Response(
            message=action.params.get("message") or RESPOND_DEFAULT_MESSAGE,
            ui=dict(action.params.get("ui") or {}),
        )

    # ========================================================================
    # Helpers
    # ========================================================================

    @staticmethod
    def _unknown_action_response() -> Response:
        return Response(
            message=UNKNOWN_ACTION_MESSAGE,
            ui={"suggested_questions": list(UNKNOWN_ACTION_QUESTIONS)},
        )

    def _finish(self, response: Response, message: str, context: ConversationContext) -> Response:
        """Validate; error responses never carry a context patch."""
        validated = self.validator.validate(response, message, context)
        validated.next_action = None
        if validated.error:
            validated.context = {}
        return validated
