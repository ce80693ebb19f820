from rollimport.config import MergeConfig
from rollimport.models import Gender, VoterRecord
from rollimport.processors import deduplicate, merge_strategies, score_field
from rollimport.processors.segmenter import canonical_serial


def voter(serial, **fields):
    fields.setdefault("name", "রহিম")
    return VoterRecord(serial_no=int(serial), cr=canonical_serial(str(serial)), **fields)


def test_fill_rule():
    [merged] = merge_strategies([voter(1, father_name="")], [voter(1, father_name="রহিম")])
    assert merged.father_name == "রহিম"


def test_identifier_prefers_longer():
    [merged] = merge_strategies([voter(1, voter_no="1234")], [voter(1, voter_no="123456")])
    assert merged.voter_no == "123456"

    [merged] = merge_strategies([voter(1, nid="123456")], [voter(1, nid="1234")])
    assert merged.nid == "123456"


def test_date_prefers_full_pattern():
    [merged] = merge_strategies([voter(1, date_of_birth="1/2/80")], [voter(1, date_of_birth="01/02/1980")])
    assert merged.date_of_birth == "01/02/1980"

    [merged] = merge_strategies([voter(1, date_of_birth="01/02/1980")], [voter(1, date_of_birth="01/02/198")])
    assert merged.date_of_birth == "01/02/1980"


def test_text_field_prefers_denser_value():
    [merged] = merge_strategies([voter(1, mother_name="রহিমা")], [voter(1, mother_name="রহিমা বেগম")])
    assert merged.mother_name == "রহিমা বেগম"


def test_label_artifacts_are_penalised():
    assert score_field("রহিমা বেগম") == 9
    assert score_field("রহিমা পিতা") == 9 - 10

    [merged] = merge_strategies([voter(1, mother_name="রহিমা")], [voter(1, mother_name="রহিমা বেগম পিতা")])
    assert merged.mother_name == "রহিমা"


def test_penalty_is_configurable():
    config = MergeConfig(label_penalty=0)
    assert score_field("রহিমা পিতা", config.label_penalty) == 9


def test_tie_keeps_existing():
    [merged] = merge_strategies([voter(1, father_name="করিম")], [voter(1, father_name="রহিম")])
    assert merged.father_name == "করিম"


def test_merge_sorts_and_keeps_unmatched():
    a = [voter(3), voter(1)]
    b = [voter(2), voter(1, father_name="করিম")]
    merged = merge_strategies(a, b)

    assert [v.serial_no for v in merged] == [1, 2, 3]
    assert merged[0].father_name == "করিম"


def test_strategy_a_empty():
    b = [voter(i) for i in range(1, 6)]
    assert len(merge_strategies([], b)) == 5


def test_merge_does_not_modify_inputs():
    a = [voter(1)]
    b = [voter(1, father_name="করিম")]
    merge_strategies(a, b)
    assert a[0].father_name == ""


def test_post_merge_cleanup_cuts_labels():
    [merged] = merge_strategies([voter(1, address="গ্রাম সোনাপুর পেশা: কৃষক")], [])
    assert merged.address == "গ্রাম সোনাপুর"


def test_mother_bleed_is_cut():
    [merged] = merge_strategies([voter(1, mother_name="রহিমা বেগম পেশা গৃহিণী")], [])
    assert merged.mother_name == "রহিমা বেগম"


def test_leading_zero_serials_share_a_key():
    merged = merge_strategies([voter("05", father_name="করিম")], [voter("5", voter_no="12345")])
    assert len(merged) == 1
    assert merged[0].father_name == "করিম"
    assert merged[0].voter_no == "12345"


def test_gender_is_never_overridden():
    [merged] = merge_strategies([voter(1, gender=Gender.MALE)], [voter(1, gender=Gender.FEMALE)])
    assert merged.gender is Gender.MALE

    [merged] = merge_strategies([voter(1)], [voter(1, gender=Gender.FEMALE)])
    assert merged.gender is Gender.FEMALE


def test_dedup_fill_only():
    page1 = [voter(1, father_name="করিম", voter_no="1234")]
    page2 = [voter(1, father_name="সালাম উদ্দিন", voter_no="123456", mother_name="রহিমা")]
    [final] = deduplicate(page1 + page2)

    assert final.father_name == "করিম"
    assert final.voter_no == "1234"
    assert final.mother_name == "রহিমা"


def test_dedup_is_idempotent():
    records = [voter(2), voter(1, father_name="করিম"), voter(1, mother_name="রহিমা"), voter(3)]
    once = deduplicate(records)
    twice = deduplicate(once)

    assert twice == once
    assert [v.serial_no for v in once] == [1, 2, 3]


def test_doubled_address_cut_after_merge():
    block = "গ্রাম সোনাপুর, ডাকঘর রামপুর, উপজেলা সদর"
    [merged] = merge_strategies([voter(1)], [voter(1, address=f"{block} {block}")])
    assert merged.address == block
