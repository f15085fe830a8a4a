######################################################################
#
# xorshift.py
#
# Small xorshift128 pseudorandom number generator. Each Grammar owns
# one of these so that stochastic L-Systems can be replayed exactly by
# seeding it.
#
######################################################################

import time

MASK32 = 0xFFFFFFFF

######################################################################
# C-style linear congruential generator used only to fill in the
# xorshift state words when seeding.

class _SeedSequence(object):

    def __init__(self, seed):
        self.x = seed & 0x7FFFFFFF

    def next(self):
        self.x = (self.x * 1103515245 + 12345) & 0x7FFFFFFF
        return (self.x >> 16) & 0x7FFF

######################################################################

class XorShift128(object):

    # seed is a non-negative integer, or None to seed from the clock
    def __init__(self, seed=None):
        self._state = [0, 0, 0, 0]
        self.seed(seed)

    def seed(self, seed=None):

        if seed is None:
            seed = time.time_ns() & 0x7FFF
        elif seed < 0:
            raise ValueError('seed must be non-negative, got {}'.format(seed))

        lcg = _SeedSequence(seed)

        # odd times odd is odd, so no word can end up zero
        state = [lcg.next() | 1]

        for i in range(1, 4):
            state.append((state[i-1] * (lcg.next() | 1)) & MASK32)

        self._state = state

    @property
    def state(self):
        return tuple(self._state)

    def next_uint32(self):

        s = self._state

        t = s[3]
        t ^= (t << 11) & MASK32
        t ^= t >> 8

        s[3] = s[2]
        s[2] = s[1]
        s[1] = s[0]

        t ^= s[0]
        t ^= s[0] >> 19

        s[0] = t

        return t

    # uniform in [0, 1] -- note that 1.0 itself can come up
    def next_float_unit(self):
        return self.next_uint32() / MASK32

    random = next_float_unit

    # uniform integer in [lo, hi]
    def randint(self, lo, hi):
        if hi < lo:
            raise ValueError('empty range [{}, {}]'.format(lo, hi))
        return self.next_uint32() % (hi - lo + 1) + lo
