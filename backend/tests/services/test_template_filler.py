from models.prompt import PromptType
from services.template_filler import (
    extract_placeholders,
    fill_prompt,
    fill_template,
    unrecognized_placeholders,
)


def test_missing_values_become_fallback():
    out = fill_template("Hi {{NAME}}, goal: {{GOAL}}", {"NAME": "Ann"})
    assert out == "Hi Ann, goal: N/A"


def test_none_value_uses_fallback_and_empty_string_is_kept():
    out = fill_template("[{{A}}][{{B}}]", {"A": None, "B": ""}, fallback="-")
    assert out == "[-][]"


def test_every_occurrence_is_replaced():
    out = fill_template("{{X}} and {{X}} again {{X}}", {"X": "y"})
    assert out == "y and y again y"


def test_braced_and_bare_names_are_equivalent():
    assert fill_template("{{A}}{{B}}", {"{{A}}": "1", "B": "2"}) == "12"


def test_inserted_values_are_not_rescanned():
    out = fill_template("{{A}} {{B}}", {"A": "{{B}}", "B": "b"})
    assert out == "{{B}} b"


def test_per_name_defaults_win_over_fallback():
    out = fill_template(
        "{{PROMPT}} / {{JSON}} / {{OTHER}}",
        {},
        defaults={"PROMPT": "", "{{JSON}}": "{}"},
    )
    assert out == " / {} / N/A"


def test_restricted_placeholders_leave_others_untouched():
    out = fill_template("{{KNOWN}} {{UNKNOWN}}", {}, placeholders=["{{KNOWN}}"])
    assert out == "N/A {{UNKNOWN}}"


def test_fill_prompt_uses_type_variables():
    template = "Request: {{USER_PROMPT}} {{SOMETHING_ELSE}}"
    out = fill_prompt(template, PromptType.VALIDATION, {"USER_PROMPT": "email me daily"})
    assert out == "Request: email me daily {{SOMETHING_ELSE}}"


def test_fill_prompt_with_training_data_fallback():
    template = "Make {{USER_NATURAL_LANGUAGE_PROMPT}} using {{SELECTED_TRIGGER_TOOL}}. Examples: {{TRAINING_DATA}}"
    out = fill_prompt(
        template,
        PromptType.GENERATION_MAIN,
        {"USER_NATURAL_LANGUAGE_PROMPT": "a digest", "SELECTED_TRIGGER_TOOL": "Cron Trigger", "TRAINING_DATA": None},
    )
    assert out == "Make a digest using Cron Trigger. Examples: N/A"


def test_extract_placeholders_in_first_appearance_order():
    assert extract_placeholders("{{B}} {{A}} {{B}} {not} {{lower}}") == ["{{B}}", "{{A}}"]
    assert extract_placeholders("") == []


def test_unrecognized_placeholders():
    template = "{{USER_PROMPT}} {{TYPO_PROMPT}}"
    assert unrecognized_placeholders(template, PromptType.VALIDATION) == ["{{TYPO_PROMPT}}"]
    assert unrecognized_placeholders(template, PromptType.GENERATION_MAIN_TRAINING_DATA) == [
        "{{USER_PROMPT}}",
        "{{TYPO_PROMPT}}",
    ]
