######################################################################
#
# turtle_graphics.py
#
# Turn an L-System string into line segments plus the pixel-aligned
# bounding box of everything drawn.
#
######################################################################
#
# Heading 0 points "up" the screen (negative y, since y grows
# downward), '+' turns counterclockwise on screen and '-' clockwise.
#
# There are two ways to walk a string:
#
#   FIXED: trace once with the start point as given, e.g. somewhere on
#          a canvas of known size; the bounding box tells the caller
#          what to crop afterwards.
#
#   FIT:   measure first (bounding box only), then shift the start
#          point so the top-left of the box lands on the origin and
#          trace again. The segments then fit exactly in an image of
#          size bounding_box.width x bounding_box.height.

import math
from collections import namedtuple
import numpy as np

FIXED = 'fixed'
FIT = 'fit'

WALK_MODES = (FIXED, FIT)

class UnbalancedBracketsError(RuntimeError):
    pass

######################################################################
# what the turtle looks like when it starts out
#
# angle_step is in radians; length_decay scales segment_length each
# time a branch is opened with '['

class TurtleDescriptor(namedtuple('TurtleDescriptor',
                                  'start_point, angle_step, segment_length, '
                                  'length_decay, stroke_width, draw_chars')):

    __slots__ = ()

    @classmethod
    def from_degrees(cls, angle_deg, segment_length, start_point=(0., 0.),
                     length_decay=1.0, stroke_width=1.0, draw_chars='FLR'):

        return cls(start_point=tuple(float(v) for v in start_point),
                   angle_step=math.radians(angle_deg),
                   segment_length=float(segment_length),
                   length_decay=float(length_decay),
                   stroke_width=float(stroke_width),
                   draw_chars=draw_chars)

TurtleDescriptor.__new__.__defaults__ = (1.0, 1.0, 'FLR')

# one stack frame
TurtleState = namedtuple('TurtleState', 'position, heading, segment_length')

######################################################################

class BoundingBox(namedtuple('BoundingBox', 'min_x, max_x, min_y, max_y')):

    __slots__ = ()

    # smallest box of whole pixels containing the point
    @classmethod
    def from_point(cls, point):
        x, y = point
        return cls(int(math.floor(x)), int(math.ceil(x)),
                   int(math.floor(y)), int(math.ceil(y)))

    def add_point(self, point):
        x, y = point
        return BoundingBox(min(self.min_x, int(math.floor(x))),
                           max(self.max_x, int(math.ceil(x))),
                           min(self.min_y, int(math.floor(y))),
                           max(self.max_y, int(math.ceil(y))))

    # grow the far edges only
    def padded(self, delta):
        return self._replace(max_x=self.max_x + delta,
                             max_y=self.max_y + delta)

    def translated(self, dx, dy):
        return BoundingBox(self.min_x + dx, self.max_x + dx,
                           self.min_y + dy, self.max_y + dy)

    @property
    def width(self):
        return self.max_x - self.min_x

    @property
    def height(self):
        return self.max_y - self.min_y

# segments is an n-by-2-by-2 array, each segment being
#
#  [(x0, y0), (x1, y1)]
#
# start_point is where the drawing pass actually started
WalkResult = namedtuple('WalkResult', 'segments, bounding_box, start_point')

######################################################################

def stroke_padding(stroke_width):
    return int(math.ceil(stroke_width / 2.0))

######################################################################
# interpret lstring once. If segments is a list, each drawn segment is
# appended to it; if it is None, only the bounding box is computed.
# Returns the (unpadded) bounding box.

def _interpret(lstring, desc, start_point, segments):

    draw_chars = desc.draw_chars
    angle_step = desc.angle_step
    length_decay = desc.length_decay

    cur_pos = np.array(start_point, dtype=float)
    cur_heading = 0.0
    cur_length = desc.segment_length

    bbox = BoundingBox.from_point(cur_pos)

    # a fresh stack for every pass
    stack = []

    for symbol in lstring:

        if symbol in draw_chars:

            offset = np.array([np.sin(cur_heading), -np.cos(cur_heading)])
            new_pos = cur_pos + cur_length * offset

            if segments is not None:
                segments.append([cur_pos, new_pos])

            bbox = bbox.add_point(new_pos)
            cur_pos = new_pos

        elif symbol == '+':

            cur_heading -= angle_step

        elif symbol == '-':

            cur_heading += angle_step

        elif symbol == '[':

            stack.append(TurtleState(cur_pos, cur_heading, cur_length))
            cur_length *= length_decay

        elif symbol == ']':

            if not stack:
                raise UnbalancedBracketsError(
                    "']' with no matching '[' in L-System string")

            cur_pos, cur_heading, cur_length = stack.pop()

        # anything else is a no-op

    if stack:
        raise UnbalancedBracketsError(
            "{} unclosed '[' at end of L-System string".format(len(stack)))

    return bbox

######################################################################
# the two phases of drawing: measure just computes the padded box,
# trace also produces segments

def measure(lstring, desc, start_point=None):

    if start_point is None:
        start_point = desc.start_point

    bbox = _interpret(lstring, desc, start_point, None)

    return bbox.padded(stroke_padding(desc.stroke_width))

def trace(lstring, desc, start_point=None):

    if start_point is None:
        start_point = desc.start_point

    segments = []
    bbox = _interpret(lstring, desc, start_point, segments)

    if segments:
        segments = np.array(segments)
    else:
        segments = np.zeros((0, 2, 2))

    return segments, bbox.padded(stroke_padding(desc.stroke_width))

######################################################################
# walk lstring in the given mode, see top of file

def walk(lstring, desc, mode=FIT):

    if mode == FIXED:

        segments, bbox = trace(lstring, desc)

        return WalkResult(segments, bbox, tuple(desc.start_point))

    elif mode == FIT:

        bbox = measure(lstring, desc)

        dx, dy = -bbox.min_x, -bbox.min_y
        x0, y0 = desc.start_point
        start_point = (x0 + dx, y0 + dy)

        segments, _ = trace(lstring, desc, start_point)

        # shift the measured box rather than re-rounding, so it is
        # exactly (0, width, 0, height)
        return WalkResult(segments, bbox.translated(dx, dy), start_point)

    else:

        raise ValueError('invalid walk mode: {!r} (expected one of {})'.format(
            mode, ', '.join(WALK_MODES)))
