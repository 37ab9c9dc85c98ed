# Entry point for building and running a knockout bracket from local files

import argparse
import os
import yaml
from knockout.models import Tournament
from knockout.scores import StaticScoreSource
from knockout.status import calculate_remaining_participants, get_round_statuses
from knockout.tournament import create_tournament, update_tournament


def load_standings(file_path):
    """
    Load a league roster. The file holds the league and its standings rows:

        league: {id: 314, name: Office League}
        standings:
          - {entry: 101, entry_name: Klopp Til You Drop, player_name: Ann, rank: 1, total: 1402}
    """
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file) or {}
    return {
        'league': data.get('league', {}),
        'standings': {'results': data.get('standings', [])},
    }


def format_match(match):
    names = []
    for player in match.slots:
        if player is None:
            names.append('BYE' if match.is_bye else 'TBD')
        else:
            score = f" ({player.score})" if player.score is not None else ''
            names.append(f"[{player.seed}] {player.team_name}{score}")
    line = ' vs '.join(names)
    if match.winner_id is not None:
        line += f"  -> winner {match.winner_id}"
    return line


def print_tournament(tournament: Tournament):
    print(f"\n--- {tournament.league_name} knockout ---")
    statuses = {s['round_number']: s['label'] for s in get_round_statuses(tournament)}
    for round_ in tournament.rounds:
        print(f"\n{round_.name} (GW{round_.gameweek}, {statuses[round_.round_number]})")
        for match in round_.matches:
            print(f"  M{match.match_id}: {format_match(match)}")

    print(f"\nRemaining participants: {calculate_remaining_participants(tournament.rounds)}")
    if tournament.winner_id is not None:
        winner = tournament.get_participant(tournament.winner_id)
        print(f"Champion: {winner.team_name if winner else tournament.winner_id}")


def main():
    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)

    parser = argparse.ArgumentParser(description='Build and run a knockout bracket from a league roster.')
    parser.add_argument('roster', nargs='?', default=os.path.join(base_dir, 'data', 'league.yaml'),
                        help='League roster YAML (default: data/league.yaml)')
    parser.add_argument('--scores', help='Gameweek scores YAML to settle finished rounds with')
    parser.add_argument('--start-gameweek', type=int, default=1, help='Gameweek of round 1')
    parser.add_argument('--match-size', type=int, default=2, help='Entries per match')
    args = parser.parse_args()

    standings = load_standings(args.roster)
    if not standings['standings']['results']:
        print(f"No entries loaded. Check {args.roster}")
        return

    tournament = create_tournament(standings, current_gameweek=args.start_gameweek - 1,
                                   match_size=args.match_size)

    if args.scores:
        tournament, results = update_tournament(tournament, StaticScoreSource.from_yaml(args.scores))
        print(f"Resolved {len(results)} matches")

    print_tournament(tournament)


if __name__ == '__main__':
    main()
