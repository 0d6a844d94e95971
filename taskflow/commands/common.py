"""
Helpers shared by the tf commands.
"""

from taskflow.lib.boardfile import load_board, save_board
from taskflow.lib.config import EngineConfig
from taskflow.lib.memory import MemoryStore, SubtaskView
from taskflow.lib.stores import CachedRuleStore
from taskflow.workflow.engine import AutomationEngine


def open_board(config: EngineConfig) -> MemoryStore:
    return load_board(config.board_file)


def build_engine(store: MemoryStore, config: EngineConfig) -> AutomationEngine:
    """Wire an engine over a loaded board using the configured policies."""
    return AutomationEngine(
        tasks=store,
        subtasks=SubtaskView(store),
        rules=CachedRuleStore(store, ttl=config.automation_cache_ttl),
        board_mover=store,
        move_failure_policy=config.move_failure_policy,
    )


def write_board(store: MemoryStore, config: EngineConfig) -> None:
    save_board(store, config.board_file)


def print_rule_results(results) -> None:
    if not results:
        print("Automations:    none matched")
        return
    print("Automations:")
    for result in results:
        mark = "ok" if result.success else "FAILED"
        line = f"  [{mark}] {result.rule_id}"
        if result.updates:
            line += f"  updates={result.updates}"
        if result.error:
            line += f"  error={result.error}"
        print(line)
