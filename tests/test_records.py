"""Tests for records.py — batched reading of song-post files."""

import pytest

from coros.errors import SourceError
from coros.records import list_source_files, read_records


class TestListSourceFiles:

    def test_missing_directory_is_fatal(self, tmp_path):
        with pytest.raises(SourceError, match='not found'):
            list_source_files(tmp_path / 'nope')

    def test_file_instead_of_directory_is_fatal(self, tmp_path):
        path = tmp_path / 'posts'
        path.write_text('{}')
        with pytest.raises(SourceError, match='not a directory'):
            list_source_files(path)

    def test_empty_directory_is_fatal(self, tmp_path):
        (tmp_path / 'notes.txt').write_text('not a post')
        with pytest.raises(SourceError, match='No song posts'):
            list_source_files(tmp_path)

    def test_sorted_by_name_and_filtered(self, tmp_path):
        for name in ['b.json', 'a.json', 'c.txt', 'a.json.bak']:
            (tmp_path / name).write_text('{}')
        (tmp_path / 'dir.json').mkdir()
        assert [p.name for p in list_source_files(tmp_path)] == ['a.json', 'b.json']


class TestReadRecords:

    def test_reads_objects_in_file_order(self, tmp_path):
        (tmp_path / '2.json').write_text('{"slug": "two"}')
        (tmp_path / '1.json').write_text('{"slug": "one"}')
        result = read_records(tmp_path)
        assert [r.data['slug'] for r in result.records] == ['one', 'two']
        assert [r.file_name for r in result.records] == ['1.json', '2.json']
        assert result.total_files == 2
        assert result.failed == 0

    def test_bad_files_are_skipped_not_fatal(self, tmp_path, capsys):
        (tmp_path / 'broken.json').write_text('{"slug": ')
        (tmp_path / 'list.json').write_text('[1, 2, 3]')
        (tmp_path / 'binary.json').write_bytes(b'\xff\xfe\x00')
        (tmp_path / 'ok.json').write_text('{"slug": "ok"}')

        result = read_records(tmp_path)

        assert [r.file_name for r in result.records] == ['ok.json']
        assert result.failed == 3
        err = capsys.readouterr().err
        assert 'broken.json' in err
        assert 'expected a JSON object, got list' in err

    def test_batches_preserve_order(self, tmp_path):
        for i in range(25):
            (tmp_path / f"{i:02d}.json").write_text(f'{{"n": {i}}}')
        result = read_records(tmp_path, batch_size=4)
        assert [r.data['n'] for r in result.records] == list(range(25))

    def test_non_positive_batch_size_still_reads(self, tmp_path):
        (tmp_path / 'a.json').write_text('{}')
        assert len(read_records(tmp_path, batch_size=0).records) == 1
