#!/usr/bin/python3
"""Solve an asymmetric TSP instance read from a cost matrix file.

The file holds one row of the matrix per line, entries separated by
whitespace. ``-``, ``x`` and ``inf`` mark a missing edge and ``#`` starts a
comment. Diagonal entries are ignored.

Example:
  tsp-solve instance.txt --time 30 --algorithm branch_and_bound -v
"""

import argparse
import logging
import math
import sys

from TSPClasses import InvalidProblem, NoFeasibleSolution, Scenario
from TSPSolver import DEFAULT_TIME_ALLOWANCE, TSPSolver

logger = logging.getLogger(__name__)

MISSING_EDGE_TOKENS = {'-', 'x', 'inf', '+inf', 'infinity'}

ALGORITHMS = {
    'branch_and_bound': lambda solver, args: solver.branchAndBound(args.time),
    'greedy': lambda solver, args: solver.greedy(args.time, multistart=args.multistart),
    'random': lambda solver, args: solver.defaultRandomTour(args.time, seed=args.seed),
    'farthest': lambda solver, args: solver.farthestInsertion(args.time),
}


def parse_matrix(lines):
    rows = []
    for lineno, line in enumerate(lines, start=1):
        line = line.split('#', 1)[0].strip()
        if not line:
            continue
        row = []
        for token in line.split():
            if token.lower() in MISSING_EDGE_TOKENS:
                row.append(None)
                continue
            try:
                row.append(float(token))
            except ValueError:
                raise InvalidProblem('line {}: not a cost: {!r}'.format(lineno, token)) from None
        rows.append(row)
    if not rows:
        raise InvalidProblem('no cost matrix rows found')
    return rows


def load_scenario(path):
    if path == '-':
        return Scenario.fromCostMatrix(parse_matrix(sys.stdin))
    with open(path, 'r') as f:
        return Scenario.fromCostMatrix(parse_matrix(f))


def format_results(results):
    lines = []
    soln = results['soln']
    if soln is None:
        lines.append('tour: none found')
    else:
        lines.append('tour: {}'.format(' -> '.join(str(i) for i in soln.indices() + soln.indices()[:1])))
    lines.append('cost: {}'.format(results['cost']))
    lines.append('time: {:.3f}s'.format(results['time']))
    lines.append('solutions: {}'.format(results['count']))
    for key, label in (('max', 'max queue'), ('total', 'states created'), ('pruned', 'states pruned')):
        if results.get(key) is not None:
            lines.append('{}: {}'.format(label, results[key]))
    if 'status' in results:
        lines.append('status: {}'.format(results['status'].value))
        if results['bound'] < math.inf:
            lines.append('lower bound: {}'.format(results['bound']))
    return '\n'.join(lines)


def build_parser():
    parser = argparse.ArgumentParser(description='Asymmetric TSP solver (reduced-cost-matrix branch and bound).')
    parser.add_argument('matrix', help="cost matrix file, or '-' for stdin")
    parser.add_argument('--time', type=float, default=DEFAULT_TIME_ALLOWANCE,
                        help='time allowance in seconds (default: %(default)s)')
    parser.add_argument('--algorithm', choices=sorted(ALGORITHMS), default='branch_and_bound')
    parser.add_argument('--multistart', action='store_true', help='greedy: try every start city')
    parser.add_argument('--seed', type=int, default=None, help='random: seed for the permutations')
    parser.add_argument('-v', '--verbose', action='count', default=0, help='-v for INFO, -vv for DEBUG')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format='%(asctime)s %(name)s %(levelname)s: %(message)s')

    try:
        scenario = load_scenario(args.matrix)
        solver = TSPSolver(scenario)
        results = ALGORITHMS[args.algorithm](solver, args)
    except InvalidProblem as e:
        logger.error('Invalid problem: %s', e)
        print('error: {}'.format(e), file=sys.stderr)
        return 1
    except NoFeasibleSolution as e:
        print('no feasible tour: {}'.format(e), file=sys.stderr)
        return 2

    print(format_results(results))
    return 0


if __name__ == '__main__':
    sys.exit(main())
