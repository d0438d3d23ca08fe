import unittest
from dataclasses import FrozenInstanceError

from normalize.models import PRType
from normalize.util import (
    COMMIT_PATCH_LINES,
    NO_CHANGES,
    PR_PATCH_LINES,
    branch_from_ref,
    format_diff_summary,
    normalize_commit,
    normalize_pull_request,
)


def _patch(lines):
    return "\n".join(f"+line {i}" for i in range(1, lines + 1))


def raw_commit(sha='abc123', additions=10, deletions=3, files=2):
    return {
        'sha': sha,
        'html_url': f'https://github.com/org/repo/commit/{sha}',
        'commit': {
            'message': 'Fix the bug',
            'author': {'name': 'Alice', 'email': 'alice@example.com', 'date': '2025-01-01T10:00:00Z'},
        },
        'stats': {'additions': additions, 'deletions': deletions, 'total': additions + deletions},
        'files': [{'filename': f'f{i}.py'} for i in range(files)],
    }


class TestDiffSummary(unittest.TestCase):
    def test_no_files_sentinel(self):
        self.assertEqual(format_diff_summary([], PR_PATCH_LINES), NO_CHANGES)
        self.assertEqual(format_diff_summary(None, COMMIT_PATCH_LINES), NO_CHANGES)

    def test_patch_truncated_to_mode_limit(self):
        files = [{'filename': 'a.py', 'status': 'modified', 'additions': 30, 'deletions': 0, 'patch': _patch(30)}]
        for limit in (PR_PATCH_LINES, COMMIT_PATCH_LINES):
            summary = format_diff_summary(files, limit)
            preview = summary.split('Patch preview:\n', 1)[1].split('\n\n---', 1)[0]
            self.assertEqual(preview.split('\n'), [f'+line {i}' for i in range(1, limit + 1)])
            self.assertIn('File: a.py\n', summary)
            self.assertIn('Status: modified\n', summary)
            self.assertIn('Changes: +30 -0\n', summary)
            self.assertTrue(summary.startswith('Files changed: 1\n\n'))

    def test_limits(self):
        self.assertEqual(PR_PATCH_LINES, 15)
        self.assertEqual(COMMIT_PATCH_LINES, 20)

    def test_file_without_patch(self):
        files = [{'filename': 'logo.png', 'status': 'added', 'additions': 0, 'deletions': 0}]
        summary = format_diff_summary(files, PR_PATCH_LINES)
        self.assertNotIn('Patch preview', summary)
        self.assertTrue(summary.endswith('\n---\n\n'))


class TestNormalizeCommit(unittest.TestCase):
    def test_fields(self):
        comparison = {'files': [
            {'filename': 'a.py', 'status': 'modified', 'additions': 7, 'deletions': 2, 'patch': '@@ -1 +1 @@'},
            {'filename': 'b.py', 'status': 'added', 'additions': 3, 'deletions': 1},
        ]}
        record = normalize_commit(raw_commit(), comparison, 'org/repo', 'refs/heads/main')
        self.assertEqual(record.sha, 'abc123')
        self.assertEqual(record.short_sha, 'abc123')
        self.assertEqual(record.repository, 'org/repo')
        self.assertEqual(record.branch, 'main')
        self.assertEqual(record.author, 'Alice')
        self.assertEqual(record.files_changed, 2)
        self.assertEqual(record.additions, 10)
        self.assertEqual(record.deletions, 3)
        self.assertIn('File: a.py', record.diff)
        self.assertEqual(record.url, 'https://github.com/org/repo/commit/abc123')

    def test_short_sha_is_eight_characters(self):
        record = normalize_commit(raw_commit(sha='0123456789abcdef'), {}, 'org/repo', 'refs/heads/dev')
        self.assertEqual(record.short_sha, '01234567')
        self.assertEqual(record.diff, NO_CHANGES)

    def test_record_is_immutable(self):
        record = normalize_commit(raw_commit(), {}, 'org/repo', 'refs/heads/main')
        with self.assertRaises(FrozenInstanceError):
            record.branch = 'other'

    def test_branch_from_ref(self):
        self.assertEqual(branch_from_ref('refs/heads/feature/x'), 'feature/x')
        self.assertEqual(branch_from_ref('refs/tags/v1'), 'refs/tags/v1')
        self.assertEqual(branch_from_ref(None), '')


class TestNormalizePullRequest(unittest.TestCase):
    def test_fields_and_metadata(self):
        pr = {
            'number': 7,
            'title': 'Add login',
            'body': '- [x] 🚀 **Feature**\n[ENG-1](https://linear.app/acme/issue/ENG-1)',
            'head': {'ref': 'bugfix/x'},
            'base': {'ref': 'main'},
            'user': {'login': 'alice'},
            'merged_by': None,
            'merged_at': '2025-01-02T00:00:00Z',
            'additions': 12,
            'deletions': 4,
            'html_url': 'https://github.com/org/repo/pull/7',
        }
        files = [{'filename': 'a.py', 'status': 'modified', 'additions': 12, 'deletions': 4, 'patch': _patch(40)}]
        commits = [{'sha': '1'}, {'sha': '2'}, {'sha': '3'}]
        record = normalize_pull_request(pr, files, commits, 'org/repo')
        self.assertEqual(record.type, PRType.FEATURE)
        self.assertEqual(record.source_branch, 'bugfix/x')
        self.assertEqual(record.target_branch, 'main')
        self.assertEqual(record.merged_by, 'Unknown')
        self.assertEqual(record.commits, 3)
        self.assertEqual(record.files_changed, 1)
        self.assertEqual(record.metadata.tickets, ('ENG-1',))
        self.assertIn('+line 15\n', record.diff)
        self.assertNotIn('+line 16', record.diff)

    def test_missing_body(self):
        pr = {'number': 1, 'title': 't', 'body': None, 'head': {'ref': 'docs/x'}, 'base': {'ref': 'main'}, 'user': {'login': 'bob'}}
        record = normalize_pull_request(pr, [], [], 'org/repo')
        self.assertEqual(record.body, '')
        self.assertEqual(record.type, PRType.DOCUMENTATION)
        self.assertEqual(record.diff, NO_CHANGES)


if __name__ == '__main__':
    unittest.main()
