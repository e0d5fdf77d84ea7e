"""
Unit tests for the schedule generation script.
"""
import logging
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from generate_matches import load_teams, generate_group_matches, main


@pytest.fixture
def teams_file(tmp_path):
    path = tmp_path / "teams.yaml"
    path.write_text(
        "Group A:\n  - Lions\n  - Tigers\n  - Bears\n"
        "Group B:\n  - Eagles\n  - Hawks\n"
        "Group C:\n  - Sharks\n",
        encoding='utf-8',
    )
    return str(path)


class TestLoadTeams:

    def test_groups_from_yaml(self, teams_file):
        teams = load_teams(teams_file)
        assert [t.name for t in teams] == ["Lions", "Tigers", "Bears", "Eagles", "Hawks", "Sharks"]
        assert teams[0].group_id == "Group A"
        assert teams[3].group_id == "Group B"


class TestGenerateGroupMatches:

    def test_matches_stay_within_groups(self, teams_file):
        matches = generate_group_matches(load_teams(teams_file))
        assert len(matches) == 3 + 1
        assert matches[-1] == {'teams': ["Eagles", "Hawks"], 'group': "Group B"}
        assert all(m['group'] != "Group C" for m in matches)

    def test_small_group_warning_names_group_once(self, teams_file, caplog):
        with caplog.at_level(logging.WARNING):
            generate_group_matches(load_teams(teams_file))
        assert "Group C has fewer than 2 teams" in caplog.text
        assert "Group Group" not in caplog.text

    def test_double(self, teams_file):
        matches = generate_group_matches(load_teams(teams_file), double=True)
        assert len(matches) == 8


class TestMain:

    def test_prints_timed_schedule(self, teams_file, capsys):
        code = main([teams_file, '--start-date', '2025-02-01', '--start-time', '10:00',
                     '--interval', '30', '--per-day', '2'])
        out = capsys.readouterr().out.splitlines()

        assert code == 0
        assert out == [
            "# Group A",
            "2025-02-01 10:00  Lions vs Tigers",
            "2025-02-01 10:30  Lions vs Bears",
            "2025-02-02 10:00  Tigers vs Bears",
            "",
            "# Group B",
            "2025-02-02 10:30  Eagles vs Hawks",
        ]

    def test_invalid_settings(self, teams_file, capsys):
        code = main([teams_file, '--start-date', '2025-02-01', '--per-day', '0'])
        assert code == 2
        assert "matches_per_day" in capsys.readouterr().err

    def test_empty_file(self, tmp_path, capsys):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding='utf-8')
        assert main([str(path)]) == 1
