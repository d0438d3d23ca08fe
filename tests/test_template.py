import pytest

from correlate.template import determine_pr_type, extract_pr_metadata, type_from_branch, type_from_template
from normalize.models import PRType


@pytest.mark.parametrize(
    'branch,expected',
    [
        ('feature/login', PRType.FEATURE),
        ('hotfix/prod-crash', PRType.HOTFIX),
        ('bugfix/npe', PRType.BUGFIX),
        ('fix/typo', PRType.BUGFIX),
        ('chore/deps', PRType.CHORE),
        ('docs/readme', PRType.DOCUMENTATION),
        ('refactor/service', PRType.REFACTOR),
        ('style/lint', PRType.STYLE),
        ('test/coverage', PRType.TEST),
        ('main', PRType.OTHER),
        ('features-without-slash', PRType.OTHER),
        ('', PRType.OTHER),
    ],
)
def test_type_from_branch(branch, expected):
    assert type_from_branch(branch) == expected
    assert determine_pr_type(branch, '') == expected


def test_template_checkbox_overrides_branch():
    body = "## Type\n- [x] 🚀 **Feature**\n- [ ] 🐛 **Bugfix**\n"
    assert determine_pr_type('bugfix/x', body) == PRType.FEATURE


def test_unchecked_boxes_fall_back_to_branch():
    body = "- [ ] 🚀 **Feature**\n- [ ] 🐛 **Bugfix**\n"
    assert type_from_template(body) is None
    assert determine_pr_type('chore/cleanup', body) == PRType.CHORE


def test_first_rule_wins_when_several_boxes_checked():
    body = "- [x] 🧹 **Chore**\n- [X] 🐛 **Bugfix**\n"
    # Bugfix is checked before Chore in the rule order
    assert type_from_template(body) == PRType.BUGFIX


def test_checkbox_with_multi_codepoint_emoji():
    body = "- [x] ♻️ **Refactor**"
    assert type_from_template(body) == PRType.REFACTOR


def test_metadata_defaults():
    meta = extract_pr_metadata('')
    assert meta.tickets == ()
    assert meta.breaking_changes is False
    assert meta.security == 'None'
    assert meta.testing == 'Not specified'
    assert meta.documentation == 'Not needed'


def test_metadata_from_full_template():
    body = """
## Tickets
- [ENG-10](https://linear.app/acme/issue/ENG-10)
- [ENG-11](https://linear.app/acme/issue/ENG-11)

## Checklist
- [x] ⚠️ **Breaking change**
- [ ] 🔒 Security improvement
- [x] 🔒 Security review required
- [x] Tested locally
- [ ] Unit tests added/updated
- [x] Manual testing performed
- [ ] 📝 Documentation updated
- [x] 📝 Documentation planned
"""
    meta = extract_pr_metadata(body)
    assert meta.tickets == ('ENG-10', 'ENG-11')
    assert meta.breaking_changes is True
    assert meta.security == 'Review Required'
    assert meta.testing == 'Local, Manual'
    assert meta.documentation == 'Planned'


def test_security_improvement_beats_review_required():
    body = "- [x] Security improvement\n- [x] Security review required\n"
    assert extract_pr_metadata(body).security == 'Improvement'


def test_documentation_updated_beats_planned():
    body = "- [x] Documentation planned\n- [x] Documentation updated\n"
    assert extract_pr_metadata(body).documentation == 'Updated'


def test_testing_labels_keep_fixed_order():
    body = "- [x] Manual testing performed\n- [x] Unit tests added/updated\n- [x] Tested locally\n"
    assert extract_pr_metadata(body).testing == 'Local, Added/Updated, Manual'


def test_unchecked_breaking_change_is_false():
    assert extract_pr_metadata("- [ ] ⚠️ **Breaking change**").breaking_changes is False


def test_words_containing_test_are_not_testing_boxes():
    body = "- [x] Dependencies updated to latest\n- [x] Documentation updated for the latest release\n"
    meta = extract_pr_metadata(body)
    assert meta.testing == 'Not specified'
    assert meta.documentation == 'Updated'


def test_updated_tests_either_word_order():
    assert extract_pr_metadata("- [x] Updated the unit tests").testing == 'Added/Updated'
    assert extract_pr_metadata("- [x] Tests added for the parser").testing == 'Added/Updated'


@pytest.mark.parametrize('line', ["- [x] No breaking changes", "- [x] Non-breaking change", "- [X] no breaking change"])
def test_ticked_denial_is_not_a_breaking_change(line):
    assert extract_pr_metadata(line).breaking_changes is False


def test_plain_breaking_change_line_is_detected():
    assert extract_pr_metadata("- [x] This is a breaking change").breaking_changes is True
