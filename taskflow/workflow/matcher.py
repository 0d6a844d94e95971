"""Select the automation rules an event fires."""

from taskflow.lib.types import AutomationRule, TriggerType


def _allows(allow_list: list[str], value) -> bool:
    return not allow_list or value in allow_list


def rule_matches(rule: AutomationRule, trigger_type: str, event_data: dict) -> bool:
    if not rule.is_active or rule.trigger_type != trigger_type:
        return False

    if trigger_type == TriggerType.STATUS_CHANGE.value:
        config = rule.trigger_config
        return (_allows(config.from_status, event_data.get("old_status"))
                and _allows(config.to_status, event_data.get("new_status")))

    if trigger_type == TriggerType.TASK_CREATED.value:
        return True

    return False


def match(trigger_type: str, event_data: dict, rules: list[AutomationRule]) -> list[AutomationRule]:
    """Return every rule the event fires, in the order given.

    Each match runs independently; several rules may fire for one event.
    """
    trigger_type = getattr(trigger_type, "value", trigger_type)
    return [rule for rule in rules if rule_matches(rule, trigger_type, event_data or {})]
