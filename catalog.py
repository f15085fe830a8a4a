######################################################################
#
# catalog.py
#
# Named L-Systems and a loader for L-Systems stored as JSON files.
#
######################################################################
#
# The plants and the branching/Gosper curves are from "The Algorithmic
# Beauty of Plants" (Prusinkiewicz & Lindenmayer); the rest are from
# https://en.wikipedia.org/wiki/L-system and
# http://paulbourke.net/fractals/lsys/

import json
import math
from collections import namedtuple

# rules is a list of (lhs, rhs, probability) triples, applied in order
#
# start says where the turtle begins on a fixed canvas: 'bottom' is
# centered horizontally, BOTTOM_MARGIN pixels above the bottom edge;
# 'middle' is the center of the canvas
LSystem = namedtuple('LSystem',
                     'root, rules, generations, turn_angle_deg, '
                     'segment_length, length_decay, start, draw_chars')

LSystem.__new__.__defaults__ = (1.0, 'bottom', 'FLR')

BOTTOM_MARGIN = 64.0

START_ANCHORS = ('bottom', 'middle')

class CatalogError(ValueError):
    pass

KNOWN_LSYSTEMS = {

    'plant_a': LSystem(
        root = 'F',
        rules = [('F', 'F[+F]F[-F]F', 1.0)],
        generations = 5,
        turn_angle_deg = 22.7,
        segment_length = 8.0
    ),

    'plant_b': LSystem(
        root = 'F',
        rules = [('F', 'F[+F]F[-F][F]', 1.0)],
        generations = 5,
        turn_angle_deg = 20.0,
        segment_length = 20.0
    ),

    'plant_c': LSystem(
        root = 'F',
        rules = [('F', 'FF-[-F+F+F]+[+F-F-F]', 1.0)],
        generations = 5,
        turn_angle_deg = 22.5,
        segment_length = 12.0
    ),

    'plant_d': LSystem(
        root = 'X',
        rules = [('X', 'F[+X]F[-X]+X', 1.0),
                 ('F', 'FF', 1.0)],
        generations = 7,
        turn_angle_deg = 20.0,
        segment_length = 5.0
    ),

    'plant_e': LSystem(
        root = 'X',
        rules = [('X', 'F[+X][-X]FX', 1.0),
                 ('F', 'FF', 1.0)],
        generations = 7,
        turn_angle_deg = 25.7,
        segment_length = 5.0
    ),

    'plant_f': LSystem(
        root = 'X',
        rules = [('X', 'F-[[X]+X]+F[+FX]-X', 1.0),
                 ('F', 'FF', 1.0)],
        generations = 5,
        turn_angle_deg = 22.5,
        segment_length = 16.0
    ),

    # stochastic: each F picks one of three branch shapes
    'branching': LSystem(
        root = 'F',
        rules = [('F', 'F[+F]F[-F]F', 0.33),
                 ('F', 'F[+F]F', 0.33),
                 ('F', 'F[-F]F', 0.34)],
        generations = 6,
        turn_angle_deg = math.degrees(0.37),
        segment_length = 8.0
    ),

    'hexagonal_gosper': LSystem(
        root = 'L',
        rules = [('L', 'L+R++R-L--LL-R+', 1.0),
                 ('R', '-L+RR++R+L--L-R', 1.0)],
        generations = 5,
        turn_angle_deg = 60.0,
        segment_length = 12.0,
        start = 'middle'
    ),

    'sierpinski_triangle': LSystem(
        root = 'F-G-G',
        rules = [('F', 'F-G+F+G-F', 1.0),
                 ('G', 'GG', 1.0)],
        generations = 6,
        turn_angle_deg = 120.0,
        segment_length = 6.0,
        draw_chars = 'FG'
    ),

    'sierpinski_arrowhead': LSystem(
        root = 'A',
        rules = [('A', 'B-A-B', 1.0),
                 ('B', 'A+B+A', 1.0)],
        generations = 7,
        turn_angle_deg = 60.0,
        segment_length = 4.0,
        draw_chars = 'AB'
    ),

    'dragon_curve': LSystem(
        root = 'FX',
        rules = [('X', 'X+YF+', 1.0),
                 ('Y', '-FX-Y', 1.0)],
        generations = 12,
        turn_angle_deg = 90.0,
        segment_length = 6.0,
        start = 'middle',
        draw_chars = 'F'
    ),

    'barnsley_fern': LSystem(
        root = 'X',
        rules = [('X', 'F+[[X]-X]-F[-FX]+X', 1.0),
                 ('F', 'FF', 1.0)],
        generations = 6,
        turn_angle_deg = 25.0,
        segment_length = 5.0,
        draw_chars = 'F'
    ),

    'hilbert': LSystem(
        root = 'L',
        rules = [('L', '+RF-LFL-FR+', 1.0),
                 ('R', '-LF+RFR+FL-', 1.0)],
        generations = 6,
        turn_angle_deg = 90.0,
        segment_length = 8.0,
        start = 'middle',
        draw_chars = 'F'
    ),

    'pentaplexity': LSystem(
        root = 'F++F++F++F++F',
        rules = [('F', 'F++F++F+++++F-F++F', 1.0)],
        generations = 4,
        turn_angle_deg = 36.0,
        segment_length = 6.0,
        start = 'middle',
        draw_chars = 'F'
    )

}

######################################################################
# helpers for validating JSON input -- path names the offending field

def _require(cond, path, what):
    if not cond:
        raise CatalogError('{} must be {}'.format(path, what))

def _number(data, key, path, default=None):
    value = data.get(key, default)
    _require(isinstance(value, (int, float)) and not isinstance(value, bool),
             path + '.' + key, 'a number')
    return float(value)

def _string(data, key, path, default=None):
    value = data.get(key, default)
    _require(isinstance(value, str), path + '.' + key, 'a string')
    return value

def _parse_rules(raw, path):

    rules = []

    # short form: {"F": "F[+F]F"} or {"F": ["F[+F]F", "F[-F]F"]}
    if isinstance(raw, dict):

        for lhs, rhs in raw.items():
            options = rhs if isinstance(rhs, list) else [rhs]
            prob = 1.0 / len(options) if options else 1.0
            for idx, option in enumerate(options):
                _require(isinstance(option, str),
                         '{}.{}[{}]'.format(path, lhs, idx), 'a string')
                rules.append((lhs, option, prob))

    elif isinstance(raw, list):

        for idx, entry in enumerate(raw):
            epath = '{}[{}]'.format(path, idx)
            _require(isinstance(entry, dict), epath, 'an object')
            lhs = _string(entry, 'lhs', epath)
            rhs = _string(entry, 'rhs', epath)
            prob = _number(entry, 'probability', epath, 1.0)
            rules.append((lhs, rhs, prob))

    else:
        _require(False, path, 'an object or a list')

    for lhs, _, _ in rules:
        _require(len(lhs) == 1, path, 'keyed by single symbols')

    return rules

######################################################################
# turn a dict (e.g. from json.load) into an LSystem

def parse_lsystem(data, path='lsystem'):

    _require(isinstance(data, dict), path, 'an object')

    root = _string(data, 'root', path)
    rules = _parse_rules(data.get('rules', {}), path + '.rules')

    generations = data.get('generations', 1)
    _require(isinstance(generations, int) and not isinstance(generations, bool)
             and generations >= 0,
             path + '.generations', 'a non-negative integer')

    start = _string(data, 'start', path, 'bottom')
    _require(start in START_ANCHORS, path + '.start',
             'one of ' + ', '.join(START_ANCHORS))

    return LSystem(
        root = root,
        rules = rules,
        generations = generations,
        turn_angle_deg = _number(data, 'angle', path),
        segment_length = _number(data, 'length', path, 8.0),
        length_decay = _number(data, 'decay', path, 1.0),
        start = start,
        draw_chars = _string(data, 'draw', path, 'FLR')
    )

def load_lsystem(filename):

    with open(filename, 'r') as istr:
        try:
            data = json.load(istr)
        except json.JSONDecodeError as e:
            raise CatalogError('{}: invalid JSON: {}'.format(filename, e)) from e

    return parse_lsystem(data, path=str(filename))
