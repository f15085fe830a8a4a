#!/usr/bin/env python
######################################################################
#
# lsystems.py
#
# Stochastic bracketed L-Systems: rewrite a root string in parallel
# for a number of generations, then render it with turtle graphics.
#
######################################################################
#
# Based on documentation in https://en.wikipedia.org/wiki/L-system and
# http://paulbourke.net/fractals/lsys/
#
# Every symbol in the current string is rewritten at once in each
# generation. A symbol may have several productions; one of them is
# picked at random according to its probability. Symbols without
# productions (turtle commands such as + - [ ]) are copied as-is.

import sys
import argparse
from datetime import datetime
from collections import namedtuple

from xorshift import XorShift128
from catalog import KNOWN_LSYSTEMS, BOTTOM_MARGIN, load_lsystem
import turtle_graphics
from turtle_graphics import TurtleDescriptor
from plot_segments import plot_segments, save_segments

Production = namedtuple('Production', 'lhs, rhs, probability')

Production.__new__.__defaults__ = (1.0,)

GenerationResult = namedtuple('GenerationResult',
                              'symbols, rule_summary, generation_count, '
                              'is_stochastic')

######################################################################

class Grammar(object):

    # random_source needs a random() method returning a value in
    # [0, 1]; if None, a clock-seeded XorShift128 is created
    def __init__(self, random_source=None):

        if random_source is None:
            random_source = XorShift128()

        self.random_source = random_source

        # two generation buffers, swapped after every pass
        self._buffers = [[], []]

        self.clear()

    def clear(self):

        self._root = ''
        self._rules = dict()
        self._stochastic = False
        self._generation_count = 0
        self._result = None

        for buf in self._buffers:
            buf.clear()

    def set_root(self, root):
        self._root = ''.join(root)

    # probability is not checked: if the probabilities for a symbol
    # add up to more than 1, later productions may never be picked
    def add_rule(self, production):

        if not isinstance(production, Production):
            production = Production(*production)

        production = production._replace(rhs=''.join(production.rhs))

        if len(production.lhs) != 1:
            raise ValueError('left-hand side must be a single symbol, '
                             'got {!r}'.format(production.lhs))

        if production.probability < 1:
            self._stochastic = True

        self._rules.setdefault(production.lhs, []).append(production)

    @property
    def root(self):
        return self._root

    @property
    def rules(self):
        return {lhs: tuple(prods) for lhs, prods in self._rules.items()}

    @property
    def is_stochastic(self):
        return self._stochastic

    @property
    def generation_count(self):
        return self._generation_count

    @property
    def result(self):
        return self._result

    def rule_summary(self):

        lines = ['Root is ' + self._root]

        for lhs, prods in self._rules.items():
            for prod in prods:
                line = '{} → {}'.format(lhs, prod.rhs)
                if self._stochastic:
                    line += ' ({:.2f})'.format(prod.probability)
                lines.append(line)

        return '\n'.join(lines) + '\n'

    # pick the production for one occurrence of a symbol, or None if
    # the draw lands past the last cumulative probability
    def _choose(self, prods):

        r = self.random_source.random()
        cum_prob = 0.

        for prod in prods:
            cum_prob += prod.probability
            if r <= cum_prob:
                return prod

        return None

    ##################################################
    # rewrite the root n times

    def generate(self, n):

        if n < 0:
            raise ValueError('number of generations must be non-negative, '
                             'got {}'.format(n))

        rules = self._rules

        src, dst = self._buffers
        src.clear()
        src.extend(self._root)

        for i in range(n):

            dst.clear()

            for symbol in src:

                prods = rules.get(symbol)
                prod = self._choose(prods) if prods else None

                if prod is None:
                    dst.append(symbol)
                else:
                    dst.extend(prod.rhs)

            src, dst = dst, src

        self._buffers = [src, dst]
        self._generation_count = n

        self._result = GenerationResult(
            symbols = ''.join(src),
            rule_summary = self.rule_summary(),
            generation_count = n,
            is_stochastic = self._stochastic
        )

        return self._result

######################################################################
# set up a Grammar for an entry from the catalog

def build_grammar(lsys, random_source=None):

    grammar = Grammar(random_source)

    grammar.set_root(lsys.root)

    for rule in lsys.rules:
        grammar.add_rule(Production(*rule))

    return grammar

######################################################################
# turtle descriptor for a catalog entry. On a fixed canvas of
# (width, height) pixels the turtle starts at the entry's anchor,
# otherwise at the origin.

def make_descriptor(lsys, canvas_size=None, stroke_width=1.0):

    if canvas_size is None:
        start_point = (0., 0.)
    else:
        width, height = canvas_size
        if lsys.start == 'middle':
            start_point = (0.5 * width, 0.5 * height)
        else:
            start_point = (0.5 * width, height - BOTTOM_MARGIN)

    return TurtleDescriptor.from_degrees(lsys.turn_angle_deg,
                                         lsys.segment_length,
                                         start_point=start_point,
                                         length_decay=lsys.length_decay,
                                         stroke_width=stroke_width,
                                         draw_chars=lsys.draw_chars)

######################################################################

def _canvas_size(value):

    try:
        width, height = (int(v) for v in value.lower().split('x'))
    except ValueError:
        raise argparse.ArgumentTypeError(
            'expected WIDTHxHEIGHT, got {!r}'.format(value))

    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError(
            'canvas size must be positive, got {!r}'.format(value))

    return width, height

######################################################################
# parse command-line options for this program

def parse_options(argv=None):

    parser = argparse.ArgumentParser(
        description='stochastic L-system renderer')

    parser.add_argument('lname', metavar='LSYSTEM', nargs='?',
                        help='name of desired L-system (or a JSON file '
                        'with -f)', type=str)

    parser.add_argument('-f', dest='from_file', action='store_true',
                        help='treat LSYSTEM as a path to a JSON file')

    parser.add_argument('-l', dest='list_only', action='store_true',
                        help='list known L-systems and exit')

    parser.add_argument('-n', dest='generations', metavar='GENERATIONS',
                        type=int, default=None,
                        help='number of generations (default depends '
                        'on the L-system)')

    parser.add_argument('-k', dest='variants', metavar='VARIANTS',
                        type=int, default=1,
                        help='number of variants of a stochastic '
                        'L-system to render')

    parser.add_argument('--seed', dest='seed', type=int, default=None,
                        help='seed the random number generator')

    parser.add_argument('--thick', dest='stroke_width', action='store_const',
                        const=2.0, default=1.0,
                        help='draw thick lines')

    parser.add_argument('--canvas', dest='canvas_size', metavar='WxH',
                        type=_canvas_size, default=None,
                        help='draw on a fixed canvas and crop, instead '
                        'of measuring first')

    parser.add_argument('-x', dest='max_segments', metavar='MAXSEGMENTS',
                        type=int, default=100000,
                        help='maximum number of segments to plot')

    parser.add_argument('-t', dest='text_only', action='store_true',
                        help='use text output instead of PNG')

    parser.add_argument('-r', dest='show_rules', action='store_true',
                        help='print the rules')

    parser.add_argument('-o', dest='output', metavar='FILE', default=None,
                        help='output filename')

    opts = parser.parse_args(argv)

    if opts.list_only:
        return opts

    if opts.lname is None:
        parser.error('LSYSTEM is required unless -l is given')

    if opts.from_file:
        opts.lsys = load_lsystem(opts.lname)
    elif opts.lname in KNOWN_LSYSTEMS:
        opts.lsys = KNOWN_LSYSTEMS[opts.lname]
    else:
        parser.error('unknown L-system {!r} (choose from {})'.format(
            opts.lname, ', '.join(sorted(KNOWN_LSYSTEMS))))

    if opts.generations is None:
        opts.generations = opts.lsys.generations
    elif opts.generations < 0:
        parser.error('number of generations must be non-negative')

    if opts.variants < 1:
        parser.error('number of variants must be at least 1')

    if opts.output is None:
        opts.output = 'segments.txt' if opts.text_only else 'segment_plot.png'

    if opts.canvas_size is None:
        print('measuring before drawing')
    else:
        print('drawing on a {}x{} canvas'.format(*opts.canvas_size))

    return opts

def _variant_filename(filename, idx, count):

    if count == 1:
        return filename

    stem, dot, ext = filename.rpartition('.')
    if not dot:
        return '{}_{}'.format(filename, idx)

    return '{}_{}.{}'.format(stem, idx, ext)

######################################################################
# main function

def main(argv=None):

    opts = parse_options(argv)

    if opts.list_only:
        for name in sorted(KNOWN_LSYSTEMS):
            print(name)
        return

    grammar = build_grammar(opts.lsys, XorShift128(opts.seed))

    desc = make_descriptor(opts.lsys, opts.canvas_size, opts.stroke_width)

    mode = turtle_graphics.FIT if opts.canvas_size is None else turtle_graphics.FIXED

    variants = opts.variants

    if variants > 1 and not grammar.is_stochastic:
        print('L-system is not stochastic, rendering a single variant')
        variants = 1

    for idx in range(variants):

        # time segment generation
        start = datetime.now()

        result = grammar.generate(opts.generations)

        walked = turtle_graphics.walk(result.symbols, desc, mode)
        segments = walked.segments

        # print elapsed time
        elapsed = (datetime.now() - start).total_seconds()

        if opts.show_rules and idx == 0:
            sys.stdout.write(result.rule_summary)
            print('{} generations'.format(result.generation_count))

        if len(segments):
            print('generated {} segments in {:.6f} s ({:.3f} us/segment)'.format(
                len(segments), elapsed, 1e6 * elapsed/len(segments)))
        else:
            print('generated 0 segments in {:.6f} s'.format(elapsed))

        if opts.max_segments >= 0 and len(segments) > opts.max_segments:
            print('...maximum of {} segments exceeded, skipping output!'.format(
                opts.max_segments))
            continue

        filename = _variant_filename(opts.output, idx, variants)

        if opts.text_only:
            save_segments(segments, filename)
        else:
            plot_segments(walked, opts.stroke_width, opts.canvas_size,
                          filename)

if __name__ == '__main__':
    main()
