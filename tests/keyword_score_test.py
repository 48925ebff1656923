"""Keyword scorer: deterministic substring overlap between requirement keywords and résumé text."""

from screening.scoring.keyword import STOP_WORDS, job_keywords, keyword_score, requirements_text


def _reqs(**fields):
    base = {"title": "", "description": "", "required_skills": [], "responsibilities": []}
    base.update(fields)
    return base


def test_single_skill_found_scores_one():
    """requiredSkills=["Python"], résumé "Experienced Python developer" -> 1/1."""
    reqs = _reqs(required_skills=["Python"])
    assert job_keywords(reqs) == ["python"]
    assert keyword_score(reqs, "Experienced Python developer") == 1.0


def test_no_surviving_keywords_scores_zero():
    reqs = _reqs(title="the and of", description="a an to 42 c++")
    assert job_keywords(reqs) == []
    assert keyword_score(reqs, "anything at all") == 0.0


def test_filters_short_numeric_and_stop_words():
    reqs = _reqs(description="Go, C#, AWS; 5+ years with the Python3 and Java (ideally) stack.")
    keywords = job_keywords(reqs)
    assert "go" not in keywords  # too short
    assert "python3" not in keywords  # not alphabetic
    assert "with" not in keywords and "the" not in keywords
    assert keywords == ["aws", "years", "java", "ideally", "stack"]


def test_repeated_keywords_are_not_deduplicated():
    reqs = _reqs(title="Python engineer", required_skills=["Python", "Rust"])
    assert job_keywords(reqs).count("python") == 2
    # python x2 found, engineer and rust not found -> 2/4
    assert keyword_score(reqs, "python developer") == 0.5


def test_substring_containment_not_whole_word():
    reqs = _reqs(required_skills=["script"])
    assert keyword_score(reqs, "Wrote TypeScript daily") == 1.0


def test_concatenated_keywords_score_one(sample_requirements):
    keywords = job_keywords(sample_requirements)
    assert keywords
    assert keyword_score(sample_requirements, "".join(keywords)) == 1.0


def test_score_bounded_and_deterministic(sample_requirements):
    resume = "Python and Django developer. Designed APIs on PostgreSQL."
    first = keyword_score(sample_requirements, resume)
    assert 0.0 <= first <= 1.0
    for _ in range(10):
        assert keyword_score(sample_requirements, resume) == first


def test_case_insensitive_and_empty_resume(sample_requirements):
    assert keyword_score(sample_requirements, "") == 0.0
    assert keyword_score(_reqs(required_skills=["DJANGO"]), "django") == 1.0


def test_requirements_text_includes_list_fields_lowercased(sample_requirements):
    blob = requirements_text(sample_requirements)
    assert "kubernetes" in blob
    assert "mentor engineers" in blob
    assert blob == blob.lower()


def test_stop_word_set_size():
    assert len(STOP_WORDS) >= 150
    assert "python" not in STOP_WORDS
