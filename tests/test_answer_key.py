from dataclasses import replace

from exambank.services.answer_key import build_answer_key
from exambank.services.hashing import question_hash
from exambank.services.question_bank import PracticeAreaBank, QuestionBank, QuestionRecord

from conftest import SECRET, q, tier


def test_key_covers_whole_bank(bank):
    key = build_answer_key(bank, SECRET)
    assert len(key) == sum(a.total_questions for a in bank.areas) == 12


def test_entry_contents(bank):
    key = build_answer_key(bank, SECRET)
    h = question_hash("42", "Law of Tort", "intermediate", 1, "Tort inter question 1", SECRET)
    entry = key[h]
    assert entry.area_name == "Law of Tort"
    assert entry.difficulty == "intermediate"
    assert entry.correct_answer == "Tort inter question 1 / option 1"
    assert entry.explanation == "EXPL::Tort inter question 1"
    assert entry.options["option4"] == "Tort inter question 1 / option 4"


def test_wrong_secret_resolves_nothing(bank):
    assert not set(build_answer_key(bank, SECRET)) & set(build_answer_key(bank, "other"))


def test_append_keeps_existing_hashes(bank):
    before = build_answer_key(bank, SECRET)
    grown = replace(bank, areas=tuple(
        replace(a, advanced=a.advanced + (q(f"{a.name} appended"),)) for a in bank.areas
    ))
    after = build_answer_key(grown, SECRET)
    assert set(before) <= set(after)
    assert len(after) == len(before) + len(bank.areas)


def test_reordering_a_tier_invalidates_hashes(bank):
    before = build_answer_key(bank, SECRET)
    const = bank.areas[0]
    reordered = replace(bank, areas=(replace(const, basic=tuple(reversed(const.basic))),) + bank.areas[1:])
    after = build_answer_key(reordered, SECRET)
    assert len(set(before) - set(after)) == 2


def test_duplicate_coordinates_keep_first_entry(caplog):
    first = QuestionRecord("Same question", ("a", "b", "c", "d"), "a", "first")
    second = QuestionRecord("Same question", ("a", "b", "c", "d"), "b", "second")
    bank = QuestionBank(exam_id="7", exam_name="Dupes", areas=(
        PracticeAreaBank("Family Law", basic=(first,)),
        PracticeAreaBank("Family Law", basic=(second,), advanced=tier("Family adv", 1)),
    ))
    key = build_answer_key(bank, SECRET)
    assert len(key) == 2
    h = question_hash("7", "Family Law", "basic", 0, "Same question", SECRET)
    assert key[h].explanation == "first"
    assert "Duplicate question hash" in caplog.text
