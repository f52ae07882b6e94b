import json
from pathlib import Path

import pytest

from arcade_rl.agent.trainer import TrainingSupervisor
from arcade_rl.env.dummy_env import ScriptedEmulator
from arcade_rl.errors import ResumeError
from arcade_rl.models.session import EvaluationResult


def _write(path, data):
    Path(path).write_text(json.dumps(data))


def _fake_checkpoint(prefix, iteration, memory_size=5000):
    _write(f"{prefix}_iter_{iteration}.solverstate", {"iteration": iteration})
    _write(f"{prefix}_iter_{iteration}.weights", {"iteration": iteration})
    _write(f"{prefix}_iter_{iteration}.replaymemory", {"size": memory_size})


def test_resume_from_latest_checkpoint_and_high_score(small_cfg, make_agent, save_prefix):
    _fake_checkpoint(save_prefix, 40000, memory_size=10)
    _fake_checkpoint(save_prefix, 100000)
    _write(f"{save_prefix}_HiScore50_iter_100000.weights", {})
    _write(f"{save_prefix}_HiScore20_iter_40000.weights", {})
    agent = make_agent()
    sup = TrainingSupervisor(small_cfg(), ScriptedEmulator([0]), agent, save_prefix)

    state = sup.restore()

    assert state.current_iteration == 100000
    assert state.best_score == 50
    assert agent.replay_memory_size() == 5000


def test_missing_replay_memory_is_fatal(small_cfg, make_agent, save_prefix):
    _write(f"{save_prefix}_iter_300.solverstate", {"iteration": 300})
    sup = TrainingSupervisor(small_cfg(), ScriptedEmulator([0]), make_agent(), save_prefix)
    with pytest.raises(ResumeError):
        sup.restore()


def test_explicit_snapshot_wins_over_latest(small_cfg, make_agent, save_prefix):
    _fake_checkpoint(save_prefix, 100)
    _fake_checkpoint(save_prefix, 900)
    agent = make_agent()
    cfg = small_cfg(snapshot=f"{save_prefix}_iter_100.solverstate")
    TrainingSupervisor(cfg, ScriptedEmulator([0]), agent, save_prefix).restore()
    assert agent.current_training_iteration() == 100


def test_fresh_start_without_checkpoints(small_cfg, make_agent, save_prefix):
    sup = TrainingSupervisor(small_cfg(), ScriptedEmulator([0]), make_agent(), save_prefix)
    state = sup.restore()
    assert state.current_iteration == 0
    assert state.best_score is None


def test_no_resume_ignores_existing_files(small_cfg, make_agent, save_prefix):
    _fake_checkpoint(save_prefix, 100)
    _write(f"{save_prefix}_HiScore50_iter_100.weights", {})
    sup = TrainingSupervisor(small_cfg(resume=False), ScriptedEmulator([0]), make_agent(), save_prefix)
    state = sup.restore()
    assert state.current_iteration == 0
    assert state.best_score is None


def test_weights_only_finetune(small_cfg, make_agent, save_prefix):
    agent = make_agent()
    cfg = small_cfg(weights="pretrained.weights", resume=False)
    TrainingSupervisor(cfg, ScriptedEmulator([0]), agent, save_prefix).restore()
    assert agent.loaded_weights == "pretrained.weights"
    assert agent.current_training_iteration() == 0


def test_interrupted_run_resumes_where_it_stopped(small_cfg, make_agent, save_prefix):
    first = make_agent(memory_size=1)
    TrainingSupervisor(small_cfg(), ScriptedEmulator([1, 0, 0, 0]), first, save_prefix).run()

    second = make_agent()
    sup = TrainingSupervisor(small_cfg(max_iter=20), ScriptedEmulator([1, 0, 0, 0]), second, save_prefix)
    state = sup.restore()

    assert state.current_iteration == 12
    assert state.best_score == 1.0
    assert state.episode_count == 3
    assert state.last_eval_iteration == 12
    assert second.replay_memory_size() == first.replay_memory_size()


def test_fractional_negative_best_score_survives_resume(small_cfg, make_agent, save_prefix):
    agent = make_agent(memory_size=1)
    sup = TrainingSupervisor(small_cfg(repeat_games=2), ScriptedEmulator([-1, 0]), agent, save_prefix)
    sup.evaluator.run = lambda repeat_count, iteration=0: EvaluationResult(
        scores=[-21.0, -20.0], mean=-20.5, stddev=0.7, iteration=iteration)
    sup.evaluate_and_checkpoint()
    # High-score file names truncate toward zero.
    assert Path(f"{save_prefix}_HiScore-20_iter_0.weights").is_file()

    state = TrainingSupervisor(small_cfg(), ScriptedEmulator([0]), make_agent(), save_prefix).restore()

    assert state.best_score == -20.5
    assert state.beats_best(-20.2)


def test_high_score_file_used_without_training_state(small_cfg, make_agent, save_prefix):
    _fake_checkpoint(save_prefix, 500)
    _write(f"{save_prefix}_HiScore-7_iter_500.weights", {})
    state = TrainingSupervisor(small_cfg(), ScriptedEmulator([0]), make_agent(), save_prefix).restore()
    assert state.best_score == -7.0
