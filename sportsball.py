import os
import re
import sys
import time
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from errors import CapacityExhaustionError, ConfigurationError, PriorityParseError
from heap_ import DEFAULT_INITIAL_CAPACITY, DEFAULT_STEP_SIZE, MAX_PRIORITY, MIN_PRIORITY, PriorityQueue
from logger import print_

SUB_PLAYER_TOKEN = "GO!"
INLINE_DELIMITER = "/"
TITLE = "SPORTSBALL!"
LINE_WIDTH = 80
MILLIS_PER_SECOND = 1000
DEBUG_ENV_VAR = "SPORTSBALL_DEBUG"
PRIORITY_PATTERN = re.compile(r"[+-]?[0-9]+")


class Substitution:
    def __init__(self, line_number: int, name: str, priority: int):
        self.line_number = line_number
        self.name = name
        self.priority = priority


class GameResult:
    def __init__(self):
        self.substitutions: List[Substitution] = []
        self.empty_polls: List[int] = []
        self.players_left = 0
        self.num_resizes = 0
        self.lines_read = 0


def help_str(program_name: str) -> str:
    return (f"Usage: {program_name} dataFile [initialCapacity] [stepSize] [outputDir]\n"
            "mandatory arguments:\n"
            "\tdataFile - string, path to a data file wherein each line is either\n"
            f"\t\t'{SUB_PLAYER_TOKEN}' or a player entry of the form name{INLINE_DELIMITER}priority\n"
            "optional arguments:\n"
            "\tinitialCapacity - int, number of elements the queue should support before the first resize.\n"
            "\tstepSize - int, number of elements by which to increase the size of the queue\n"
            "\t\twhen the allocated size is exceeded.\n"
            "\toutputDir - string, directory where substitutions_output.csv is written.")


def parse_player(line: str, line_number: int):
    """Split a `name/priority` line. Raises PriorityParseError naming the line."""
    name, _, priority_string = line.partition(INLINE_DELIMITER)
    priority_string = priority_string.strip()
    if not PRIORITY_PATTERN.fullmatch(priority_string):
        raise PriorityParseError(line_number, line, "not an integer")
    priority = int(priority_string, 10)
    if not MIN_PRIORITY <= priority <= MAX_PRIORITY:
        raise PriorityParseError(line_number, line, "out of range")
    return name, priority


def run_game(lines: Iterable[str], player_queue: PriorityQueue, debug=False) -> GameResult:
    result = GameResult()
    line_number = 0
    for line in lines:
        line_number += 1
        line = line.rstrip("\r\n")

        if line == SUB_PLAYER_TOKEN:
            if not player_queue.empty():
                priority = player_queue.top_priority()
                name = player_queue.top()
                player_queue.pop()
                print(f"{name} enters the game.")
                result.substitutions.append(Substitution(line_number, name, priority))
            else:
                print("No one is ready!")
                result.empty_polls.append(line_number)
        else:
            name, priority = parse_player(line, line_number)
            if debug:
                print_(f"Inserting {name}/{priority}")
            player_queue.insert(name, priority)

        if debug:
            print_(f"size: {player_queue.size()}; capacity: {player_queue.capacity()}; "
                   f"numResizes: {player_queue.num_resizes()}.")

    result.lines_read = line_number
    result.players_left = player_queue.size()
    result.num_resizes = player_queue.num_resizes()
    return result


def write_output(result: GameResult, output_dir_name: str) -> str:
    if not os.path.exists(output_dir_name):
        print("sportsball.py: Cannot find the output directory. The output will be stored in the current directory.")
        output_dir_name = "./"

    substitutions = pd.DataFrame(
        [[s.line_number, s.name, s.priority] for s in result.substitutions],
        columns=["line_number", "name", "priority"],
    )
    output_path = os.path.join(output_dir_name, "substitutions_output.csv")
    substitutions.to_csv(output_path, index=False)
    return output_path


def play_ball(data_file: str, initial_capacity=DEFAULT_INITIAL_CAPACITY, step_size=DEFAULT_STEP_SIZE,
              output_dir: Optional[str] = None, debug=False) -> int:
    """Run the game in `data_file`. Returns 0 on a clean run, 1 otherwise."""
    try:
        infile = open(data_file, "r", encoding="utf-8")
    except OSError:
        print("File could not be opened.")
        return 1

    with infile:
        pad = LINE_WIDTH - len(TITLE) - 5
        print("#" * 3 + " " + TITLE + " " + "#" * pad)

        player_queue = PriorityQueue(initial_capacity, step_size, debug_hook=print_ if debug else None)
        try:
            result = run_game(infile, player_queue, debug=debug)
        except PriorityParseError as e:
            print(f"There was a problem reading in the priority on line {e.line_number}.")
            print(e, file=sys.stderr)
            return 1
        except UnicodeDecodeError as e:
            print("There was a problem reading the data file.")
            print(e, file=sys.stderr)
            return 1

    print("-" * LINE_WIDTH)
    print(f"At the end, there were {result.players_left} players left.")
    print(f"The array was resized {result.num_resizes} times.")

    if output_dir is not None:
        write_output(result, output_dir)
    return 0


def generate_random_game(filename: str, n_players: int, n_polls: int,
                         random_generator: np.random.Generator, max_priority=100) -> None:
    """Write a game file with `n_players` entries and `n_polls` GO! lines in random order."""
    lines = [f"player{i}{INLINE_DELIMITER}{random_generator.integers(-max_priority, max_priority + 1)}"
             for i in range(n_players)]
    lines.extend([SUB_PLAYER_TOKEN] * n_polls)
    order = random_generator.permutation(len(lines))
    try:
        with open(filename, "w") as game_file:
            for i in order:
                game_file.write(lines[i] + "\n")
    except OSError as e:
        raise RuntimeError(f"Error generating random game file '{filename}': {e}")


def debug_enabled() -> bool:
    return os.environ.get(DEBUG_ENV_VAR, "").strip().lower() in ("1", "true", "yes")


def main(argv):
    start = time.time()
    return_val = 1

    required_args = 1
    optional_args = 3
    max_args = 1 + required_args + optional_args
    min_args = 1 + required_args
    program_name = argv[0] if argv else "sportsball.py"

    if len(argv) <= 1:
        print(help_str(program_name))
    elif min_args <= len(argv) <= max_args:
        data_file = argv[1]
        initial_capacity = DEFAULT_INITIAL_CAPACITY
        step_size = DEFAULT_STEP_SIZE
        output_dir = argv[4] if len(argv) >= 5 else None
        try:
            if len(argv) >= 3:
                initial_capacity = int(argv[2])
            if len(argv) >= 4:
                step_size = int(argv[3])
        except ValueError:
            print("You entered a non-integer value for an integer parameter.", file=sys.stderr)
        else:
            try:
                return_val = play_ball(data_file, initial_capacity, step_size, output_dir, debug=debug_enabled())
            except (ConfigurationError, CapacityExhaustionError) as e:
                print(f"ERROR: {e}", file=sys.stderr)
    else:
        print("Invalid arguments.")
        print(help_str(program_name))

    elapsed = time.time() - start
    print(f"Elapsed {elapsed * MILLIS_PER_SECOND:.3f}ms.")
    return return_val


def cli():
    sys.exit(main(sys.argv))


if __name__ == "__main__":
    cli()
