"""Tests for headless runs with a mocked LLM."""

import json
from unittest.mock import Mock, patch

import asyncio
import pytest

from letterstacks.environment import Board, LetterStacksRun, MemoryScoreLog, PlayerConfig, RunConfig
from letterstacks.main import load_config
from letterstacks.verifiers import WordListDictionary


def create_mock_response(content: str) -> Mock:
    return Mock(
        choices=[Mock(message=Mock(content=content, role='assistant'))],
        usage=Mock(prompt_tokens=50, completion_tokens=20, total_tokens=70),
    )


def make_run(**config_overrides) -> LetterStacksRun:
    fields = dict(
        rows=2,
        cols=3,
        seed=3,
        max_turns=5,
        turn_ms=0,
        settings={"version": 2, "level": 1, "stack_ceiling": 6},
        player=PlayerConfig(model="gpt-5-nano"),
    )
    fields.update(config_overrides)
    return LetterStacksRun.create(
        config=RunConfig(**fields),
        dictionary=WordListDictionary.from_words(["cat", "dog"]),
        score_log=MemoryScoreLog(),
    )


def set_board(run: LetterStacksRun, stacks) -> None:
    session = run.session
    session.board = Board(rows=session.rows, cols=session.cols, stacks=[list(s) for s in stacks])
    session.scheduler.reset()
    session.scheduler.choose_targets(session.board, session.tempo.current.quantity)


class TestCreate:
    """Test run construction."""

    def test_create_from_config(self):
        run = make_run()
        assert run.session.rows == 2
        assert run.session.settings.level == 1
        assert run.player.name == "gpt-5-nano"

    def test_legacy_settings_migrated(self):
        run = make_run(settings={"difficulty": "hard", "threshold": "8"})
        assert run.session.settings.level == 12
        assert run.session.ceiling == 8

    def test_player_extras_reach_client(self):
        run = make_run(player=PlayerConfig(model="gpt-5-nano", reasoning_effort="low"))
        assert run.player.llm_client.additional_params == {"reasoning_effort": "low"}


class TestStep:
    """Test single turns."""

    @patch('litellm.completion')
    def test_submit_accepted(self, mock_completion):
        """A valid word is played and recorded."""
        mock_completion.return_value = create_mock_response(
            "<game_plan>CAT</game_plan><action>SUBMIT</action><tiles>0 1 2</tiles>"
        )
        run = make_run()
        run.setup()
        set_board(run, ["C", "A", "T", "D", "O", "G"])

        turn = asyncio.run(run.step())

        assert turn.action == "SUBMIT"
        assert turn.word == "CAT"
        assert turn.submission.accepted
        assert turn.thinking == "CAT"
        assert turn.prompt_tokens == 50
        assert run.player.words_found == ["CAT"]
        assert run.session.words == ["CAT"]
        assert run.current_turn == 1

    @patch('litellm.completion')
    def test_system_prompt_added_once(self, mock_completion):
        mock_completion.return_value = create_mock_response("<action>WAIT</action>")
        run = make_run()
        run.setup()

        asyncio.run(run.step())
        asyncio.run(run.step())

        roles = [m["role"] for m in run.player.llm_client.messages]
        assert roles == ["system", "user", "assistant", "user", "assistant"]

    @patch('litellm.completion')
    def test_feedback_reaches_next_prompt(self, mock_completion):
        """A rejection is reported in the following prompt."""
        mock_completion.return_value = create_mock_response("<action>SUBMIT</action><tiles>2 1 0</tiles>")
        run = make_run()
        run.setup()
        set_board(run, ["C", "A", "T", "D", "O", "G"])

        first = asyncio.run(run.step())
        asyncio.run(run.step())

        assert not first.submission.accepted
        last_prompt = run.player.llm_client.messages[-2]["content"]
        assert "Rejected: TAC" in last_prompt
        assert run.player.rejected == 2

    @patch('litellm.completion')
    def test_unusable_tiles_reported(self, mock_completion):
        mock_completion.return_value = create_mock_response("<action>SUBMIT</action><tiles>0 1 2 9</tiles>")
        run = make_run()
        run.setup()
        set_board(run, ["C", "A", "T", "D", "O", "G"])

        turn = asyncio.run(run.step())

        assert turn.submission.accepted
        assert "9" in turn.error

    @patch('litellm.completion')
    def test_drop(self, mock_completion):
        mock_completion.return_value = create_mock_response("<action>DROP</action>")
        run = make_run()
        run.setup()

        turn = asyncio.run(run.step())

        assert turn.action == "DROP"
        assert turn.spawns_during_turn == 1
        assert run.session.letters_spawned == 1

    @patch('litellm.completion')
    def test_time_passes_while_thinking(self, mock_completion):
        """turn_ms of game time elapses after the action."""
        mock_completion.return_value = create_mock_response("<action>WAIT</action>")
        run = make_run(turn_ms=10000)
        run.setup()

        turn = asyncio.run(run.step())

        assert turn.think_ms == 10000
        assert turn.spawns_during_turn == 1
        assert run.session.elapsed_ms == pytest.approx(10000)

    @patch('litellm.completion')
    def test_llm_error_is_a_wait(self, mock_completion):
        """Provider errors become a WAIT turn and the clock still runs."""
        mock_completion.side_effect = Exception("API Error")
        run = make_run(turn_ms=10000)
        run.setup()

        turn = asyncio.run(run.step())

        assert turn.action == "WAIT"
        assert turn.error == "LLM error: API Error"
        assert turn.spawns_during_turn == 1
        assert run.current_turn == 1

    @patch('litellm.completion')
    def test_clearing_board_completes_run(self, mock_completion):
        mock_completion.return_value = create_mock_response("<action>SUBMIT</action><tiles>0 1 2</tiles>")
        run = make_run()
        run.setup()
        set_board(run, ["C", "A", "T", "", "", ""])

        turn = asyncio.run(run.step())

        assert turn.status_after == "won"
        assert run.is_complete
        assert run.end_reason == "You cleared the board!"
        assert len(run.session.score_log.records()) == 1

    def test_step_after_complete_raises(self):
        run = make_run()
        run.setup()
        run.is_complete = True
        with pytest.raises(ValueError):
            asyncio.run(run.step())


class TestRun:
    """Test full runs."""

    @patch('litellm.completion')
    def test_max_turns(self, mock_completion):
        mock_completion.return_value = create_mock_response("<action>WAIT</action>")
        run = make_run(max_turns=3)

        result = run.run()

        assert result.total_turns == 3
        assert result.end_reason == "Max turns (3) reached"
        assert result.status == "running"
        assert result.total_tokens == 210
        assert mock_completion.call_count == 3

    @patch('litellm.completion')
    def test_on_turn_callback(self, mock_completion):
        mock_completion.return_value = create_mock_response("<action>WAIT</action>")
        run = make_run(max_turns=2)
        seen = []

        run.run(on_turn=lambda turn: seen.append(turn.turn_number))

        assert seen == [1, 2]

    @patch('litellm.completion')
    def test_save_result(self, mock_completion, tmp_path):
        mock_completion.return_value = create_mock_response("<action>WAIT</action>")
        run = make_run(max_turns=1)
        run.run()

        path = tmp_path / "results" / "run.json"
        run.save_result(path)

        data = json.loads(path.read_text())
        assert data["total_turns"] == 1
        assert data["settings"] == {"version": 2, "level": 1, "stack_ceiling": 6}
        assert data["conversation_history"][0]["role"] == "system"
        assert "board" in data["session_state"]


class TestLoadConfig:
    """Test YAML configuration."""

    def test_load_config(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "rows: 4\n"
            "cols: 4\n"
            "turn_ms: 3000\n"
            "settings:\n"
            "  level: 7\n"
            "  stack_ceiling: 7\n"
            "player:\n"
            "  model: gpt-5-nano\n"
            "  temperature: 0.3\n"
            "  reasoning_effort: low\n"
        )

        config = load_config(str(path))

        assert config.rows == 4
        assert config.turn_ms == 3000
        assert config.settings == {"level": 7, "stack_ceiling": 7}
        assert config.player.temperature == 0.3
        assert config.player.reasoning_effort == "low"

    def test_missing_config(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))
