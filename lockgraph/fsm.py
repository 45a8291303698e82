from __future__ import annotations

from statemachine import State, StateMachine

from lockgraph.api.models import GameSession, SessionPhase


class SessionFSM(StateMachine):
    """FSM wrapper around GameSession.

    Only guards the phase: a session plays until it reaches a target, after
    which no transition is defined. Move legality lives in the engine.
    """

    playing = State(SessionPhase.playing.value, value=SessionPhase.playing.value, initial=True)
    finished = State(SessionPhase.finished.value, value=SessionPhase.finished.value, final=True)

    move = playing.to.itself()
    reach_target = playing.to(finished)

    def __init__(self, session: GameSession):
        self.session = session
        super().__init__(start_value=session.phase.value)

    def sync_phase_to_model(self) -> None:
        self.session.phase = SessionPhase(str(self.current_state.value))
