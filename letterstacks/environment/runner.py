import asyncio
import json
import time
from datetime import datetime
from pathlib import Path
from typing import List, Dict, Optional, Any, Callable
from pydantic import BaseModel, Field, ConfigDict

from .loop import GameLoop
from .models import RunConfig, RunResult, TurnResult
from .player import Player
from .prompts import get_system_prompt, build_player_prompt
from .scores import JsonScoreLog
from .session import GameSession
from .settings import parse_settings
from .llm_client import response_text, response_usage
from .tempo import describe_level
from ..utils.board_render import render_board, render_status
from ..verifiers.dictionary import create_dictionary


class LetterStacksRun(BaseModel):
    """
    Headless run of Letter Stacks with an LLM player.

    Each turn the player sees the board, answers with an action, the action
    is applied, and then the game clock advances by the turn's think time,
    so letters keep landing however long the model takes.

    Attributes:
        config: Run configuration
        session: The game session
        player: The LLM player
        turn_history: History of all turns
        current_turn: Number of turns taken
        is_complete: Whether the run has finished
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    config: RunConfig = Field(default_factory=RunConfig)
    session: Optional[GameSession] = None
    player: Optional[Player] = None
    turn_history: List[TurnResult] = Field(default_factory=list)
    current_turn: int = 0
    is_complete: bool = False
    end_reason: str = ""
    started_at: Optional[datetime] = None
    _loop: Optional[GameLoop] = None

    @classmethod
    def create(
        cls,
        config: Optional[RunConfig] = None,
        dictionary: Any = None,
        score_log: Any = None,
        **config_kwargs: Any
    ) -> "LetterStacksRun":
        """
        Factory method to create a run with a configured session and player.

        Args:
            config: Optional RunConfig instance
            dictionary: Word checker (built from the config if omitted)
            score_log: Score sink (a JSON file from the config if omitted)
            **config_kwargs: Config parameters if config not provided

        Returns:
            Configured LetterStacksRun
        """
        if config is None:
            config = RunConfig(**config_kwargs)

        if dictionary is None:
            dictionary = create_dictionary(config.dictionary, config.dictionary_fallback)
        if score_log is None and config.scores:
            score_log = JsonScoreLog(path=Path(config.scores))

        session = GameSession.create(
            settings=parse_settings(config.settings),
            rows=config.rows,
            cols=config.cols,
            seed=config.seed,
            dictionary=dictionary,
            score_log=score_log,
        )

        player_config = config.player
        llm_kwargs = dict(player_config.__pydantic_extra__ or {})
        player = Player.create(
            model=player_config.model,
            name=player_config.name,
            temperature=player_config.temperature,
            max_tokens=player_config.max_tokens,
            history_pairs=player_config.history_pairs,
            **llm_kwargs
        )

        return cls(config=config, session=session, player=player)

    @property
    def loop(self) -> GameLoop:
        if self._loop is None or self._loop.session is not self.session:
            self._loop = GameLoop(self.session)
        return self._loop

    def setup(self) -> None:
        """Start a fresh session and clear the run history."""
        if self.session is None:
            raise ValueError("Session not initialized")

        self.session.reset()
        self.started_at = datetime.now()
        self.current_turn = 0
        self.is_complete = False
        self.end_reason = ""
        self.turn_history = []

    def check_complete(self) -> bool:
        """Mark the run complete on a terminal session or the turn limit."""
        if self.session.is_over:
            self.is_complete = True
            self.end_reason = self.session.end_reason
        elif self.current_turn >= self.config.max_turns:
            self.is_complete = True
            self.end_reason = f"Max turns ({self.config.max_turns}) reached"
        return self.is_complete

    def record_turn(self, turn_result: TurnResult) -> None:
        """Record a turn result in history."""
        self.turn_history.append(turn_result)
        self.current_turn += 1
        self.player.turn_count += 1

    def _last_turn_feedback(self) -> Dict[str, Any]:
        if not self.turn_history:
            return {}

        turn = self.turn_history[-1]
        feedback: Dict[str, Any] = {
            "action_error": turn.error,
            "spawned": turn.spawns_during_turn,
        }
        if turn.submission is not None:
            feedback["last_word"] = turn.submission.word
            feedback["accepted"] = turn.submission.accepted
            feedback["rejection"] = turn.submission.message
        return feedback

    def _think_ms(self, latency_s: float) -> int:
        if self.config.turn_ms is not None:
            return self.config.turn_ms
        return round(latency_s * 1000)

    def _pass_time(self, think_ms: int) -> int:
        outcomes = self.loop.advance(think_ms)
        return sum(len(o.events) for o in outcomes)

    async def step(self) -> TurnResult:
        """
        Execute a single turn.

        Prompts the LLM, parses the response, applies the action, then
        advances the game clock.

        Returns:
            TurnResult containing the turn outcome
        """
        if self.session is None or self.player is None:
            raise ValueError("Run not initialized. Call setup() first.")
        if self.is_complete:
            raise ValueError("Run is already complete")
        if self.player.llm_client is None:
            raise ValueError("Player has no LLM client")

        session = self.session
        client = self.player.llm_client
        turn_number = self.current_turn + 1

        prompt = build_player_prompt(
            session.render_state(),
            turn_number,
            words_found=self.player.words_found,
            **self._last_turn_feedback()
        )
        if not client.messages:
            client.add_message("system", get_system_prompt(session.rows, session.cols, session.ceiling))
        client.add_message("user", prompt)

        started = time.monotonic()
        try:
            response = await asyncio.to_thread(client.completion)
            raw_response = response_text(response)
            usage = response_usage(response)
        except Exception as e:
            # Handle LLM errors gracefully: the clock still runs
            think_ms = self._think_ms(time.monotonic() - started)
            spawned = self._pass_time(think_ms)
            turn_result = TurnResult(
                turn_number=turn_number,
                action="WAIT",
                think_ms=think_ms,
                spawns_during_turn=spawned,
                status_after=session.status,
                error=f"LLM error: {str(e)}",
            )
            self.record_turn(turn_result)
            self.check_complete()
            return turn_result

        think_ms = self._think_ms(time.monotonic() - started)
        client.add_message("assistant", raw_response)
        parsed = Player.parse_response(raw_response)

        submission = None
        word = None
        action_error = None
        spawned = 0

        if parsed.action == "SUBMIT":
            selected = session.select(parsed.tiles)
            ignored = [i for i in parsed.tiles if i not in selected]
            if ignored:
                action_error = f"Ignored unusable cells: {ignored}"
            submission = await session.submit()
            word = submission.word
            self.player.record_submission(submission.word, submission.accepted)
        elif parsed.action == "DROP":
            outcome = session.drop()
            if outcome is not None:
                spawned += len(outcome.events)

        spawned += self._pass_time(think_ms)

        turn_result = TurnResult(
            turn_number=turn_number,
            action=parsed.action,
            tiles=parsed.tiles,
            word=word,
            submission=submission,
            thinking=parsed.thinking,
            think_ms=think_ms,
            spawns_during_turn=spawned,
            status_after=session.status,
            raw_response=raw_response,
            error=action_error,
            **usage,
        )
        self.record_turn(turn_result)
        self.check_complete()
        return turn_result

    async def run_async(
        self,
        on_turn: Optional[Callable[[TurnResult], None]] = None,
        verbose: bool = False,
    ) -> RunResult:
        """Play turns until the run completes."""
        if not self.started_at:
            self.setup()

        if verbose:
            print(f"Starting run with {self.player.name}")
            print(describe_level(self.session.settings.level))
            print(f"Stack ceiling: x{self.session.ceiling}")
            print(f"Max turns: {self.config.max_turns}")
            print("-" * 40)

        while not self.is_complete:
            if verbose:
                state = self.session.render_state()
                print(f"\n{'='*60}")
                print(f"Turn {self.current_turn + 1}")
                print(render_board(state))
                print(render_status(state))
                print("-" * 60)
                print("Calling LLM...", end=" ", flush=True)

            turn_result = await self.step()

            if verbose:
                print("done.\n")
                if turn_result.thinking:
                    print("Game Plan:")
                    print(turn_result.thinking)
                    print()

                action_str = f"Action: {turn_result.action}"
                if turn_result.tiles:
                    action_str += f" {turn_result.tiles}"
                print(action_str)

                if turn_result.error:
                    print(f"ERROR: {turn_result.error}")
                if turn_result.submission:
                    sub = turn_result.submission
                    if sub.accepted:
                        print(f"Accepted: {sub.word}")
                    else:
                        print(f"Rejected: {sub.word or '(nothing)'} ({sub.message})")
                if turn_result.spawns_during_turn:
                    print(f"{turn_result.spawns_during_turn} letters landed ({turn_result.think_ms} ms)")

            if on_turn:
                on_turn(turn_result)

        if verbose:
            print("-" * 40)
            print(f"Run complete: {self.end_reason}")
            print(f"Words: {', '.join(self.session.words) or '(none)'}")
            print("\n=== Final Board ===")
            print(render_board(self.session.render_state()))

        return self.get_result()

    def run(
        self,
        on_turn: Optional[Callable[[TurnResult], None]] = None,
        verbose: bool = False,
    ) -> RunResult:
        """
        Run until completion.

        Args:
            on_turn: Optional callback called after each turn
            verbose: If True, print progress to stdout

        Returns:
            RunResult containing the full run data
        """
        return asyncio.run(self.run_async(on_turn=on_turn, verbose=verbose))

    def get_result(self) -> RunResult:
        """
        Get the run result.

        Returns:
            RunResult containing full run data
        """
        ended_at = datetime.now()
        duration = (ended_at - self.started_at).total_seconds() if self.started_at else 0.0

        total_prompt_tokens = sum(t.prompt_tokens or 0 for t in self.turn_history)
        total_completion_tokens = sum(t.completion_tokens or 0 for t in self.turn_history)
        total_tokens = sum(t.total_tokens or 0 for t in self.turn_history)

        return RunResult(
            config=self.config,
            settings=self.session.settings,
            status=self.session.status,
            end_reason=self.end_reason,
            total_turns=self.current_turn,
            words=list(self.session.words),
            letters_spawned=self.session.letters_spawned,
            elapsed_ms=round(self.session.elapsed_ms),
            turn_history=self.turn_history,
            session_state=self.session.get_state(),
            conversation_history=self.player.llm_client.get_messages() if self.player.llm_client else [],
            started_at=self.started_at.isoformat() if self.started_at else "",
            ended_at=ended_at.isoformat(),
            duration_seconds=duration,
            total_prompt_tokens=total_prompt_tokens,
            total_completion_tokens=total_completion_tokens,
            total_tokens=total_tokens,
        )

    def save_result(self, path: str | Path) -> None:
        """
        Save the run result to a JSON file.

        Args:
            path: Path to save the result file
        """
        result = self.get_result()
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w') as f:
            json.dump(result.model_dump(mode="json"), f, indent=2, default=str)
