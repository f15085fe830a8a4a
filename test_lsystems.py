import os
from typing import List

import numpy as np
import pytest

from catalog import BOTTOM_MARGIN, KNOWN_LSYSTEMS, LSystem
from lsystems import (
    GenerationResult,
    Grammar,
    Production,
    build_grammar,
    main,
    make_descriptor,
)
from plot_segments import load_segments
from xorshift import XorShift128


class ScriptedSource:
    """Stands in for the random source, handing out fixed draws."""

    def __init__(self, draws: List[float]) -> None:
        self.draws = list(draws)
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.draws.pop(0)


def plant_grammar(random_source=None) -> Grammar:
    grammar = Grammar(random_source)
    grammar.set_root("F")
    grammar.add_rule(Production("F", "F[+F]F[-F]F"))
    return grammar


class TestDeterministic:
    def test_one_generation(self) -> None:
        result = plant_grammar(XorShift128(0)).generate(1)
        assert result.symbols == "F[+F]F[-F]F"
        assert result.generation_count == 1
        assert result.is_stochastic is False

    def test_two_generations(self) -> None:
        gen1 = "F[+F]F[-F]F"
        result = plant_grammar(XorShift128(0)).generate(2)
        assert result.symbols == gen1.replace("F", gen1)
        assert len(result.symbols) == 61

    def test_zero_generations_is_root(self) -> None:
        grammar = plant_grammar(XorShift128(0))
        grammar.set_root("F+F")
        assert grammar.generate(0).symbols == "F+F"

    def test_empty_root(self) -> None:
        grammar = plant_grammar(XorShift128(0))
        grammar.set_root("")
        assert grammar.generate(4).symbols == ""

    def test_independent_of_seed(self) -> None:
        outputs = {plant_grammar(XorShift128(seed)).generate(3).symbols
                   for seed in (0, 1, 42, 9999)}
        assert len(outputs) == 1

    def test_unmatched_symbols_copied(self) -> None:
        grammar = Grammar(XorShift128(0))
        grammar.set_root("A+B-[C]")
        grammar.add_rule(Production("A", "AB"))
        assert grammar.generate(1).symbols == "AB+B-[C]"

    def test_several_symbols_rewritten_in_parallel(self) -> None:
        grammar = Grammar(XorShift128(0))
        grammar.set_root("A")
        grammar.add_rule(Production("A", "AB"))
        grammar.add_rule(Production("B", "A"))
        assert [grammar.generate(n).symbols for n in range(5)] == [
            "A", "AB", "ABA", "ABAAB", "ABAABABA"]

    @pytest.mark.parametrize("name", sorted(KNOWN_LSYSTEMS))
    def test_length_never_shrinks(self, name: str) -> None:
        grammar = build_grammar(KNOWN_LSYSTEMS[name], XorShift128(11))
        lengths = [len(grammar.generate(n).symbols) for n in range(4)]
        assert lengths == sorted(lengths)

    def test_previous_result_untouched(self) -> None:
        grammar = plant_grammar(XorShift128(0))
        first = grammar.generate(1)
        second = grammar.generate(2)
        assert first.symbols == "F[+F]F[-F]F"
        assert grammar.result is second
        assert grammar.generation_count == 2

    def test_negative_generations_rejected(self) -> None:
        with pytest.raises(ValueError):
            plant_grammar(XorShift128(0)).generate(-1)


class TestStochastic:
    def ladder(self, source) -> Grammar:
        grammar = Grammar(source)
        grammar.set_root("F")
        grammar.add_rule(Production("F", "A", 0.33))
        grammar.add_rule(Production("F", "B", 0.33))
        grammar.add_rule(Production("F", "C", 0.34))
        return grammar

    @pytest.mark.parametrize("draw, expected", [
        (0.0, "A"),
        (0.33, "A"),
        (0.5, "B"),
        (0.6, "B"),
        (0.9, "C"),
    ])
    def test_cumulative_ladder(self, draw: float, expected: str) -> None:
        grammar = self.ladder(ScriptedSource([draw]))
        assert grammar.generate(1).symbols == expected

    def test_draw_of_one_picks_last_rung(self) -> None:
        grammar = Grammar(ScriptedSource([1.0]))
        grammar.set_root("F")
        grammar.add_rule(Production("F", "A", 0.5))
        grammar.add_rule(Production("F", "B", 0.5))
        assert grammar.generate(1).symbols == "B"

    def test_partial_distribution_falls_back_to_copy(self) -> None:
        grammar = Grammar(ScriptedSource([0.9, 0.1]))
        grammar.set_root("FF")
        grammar.add_rule(Production("F", "A", 0.2))
        grammar.add_rule(Production("F", "B", 0.3))
        assert grammar.generate(1).symbols == "FA"

    def test_overfull_distribution_shadows_later_rules(self) -> None:
        grammar = Grammar(ScriptedSource([0.6, 0.95, 1.0]))
        grammar.set_root("FFF")
        grammar.add_rule(Production("F", "A", 0.7))
        grammar.add_rule(Production("F", "B", 0.7))
        grammar.add_rule(Production("F", "C", 0.7))
        assert grammar.generate(1).symbols == "ABB"

    def test_one_draw_per_rewritable_symbol(self) -> None:
        source = ScriptedSource([0.1] * 10)
        grammar = self.ladder(source)
        grammar.set_root("F+F-[F]")
        grammar.generate(1)
        assert source.calls == 3

    def test_same_seed_reproducible(self) -> None:
        lsys = KNOWN_LSYSTEMS["branching"]
        a = build_grammar(lsys, XorShift128(7)).generate(4)
        b = build_grammar(lsys, XorShift128(7)).generate(4)
        assert a.symbols == b.symbols
        assert a.is_stochastic and b.is_stochastic

    def test_stochastic_flag(self) -> None:
        grammar = Grammar(XorShift128(0))
        grammar.add_rule(Production("F", "FF"))
        assert not grammar.is_stochastic
        grammar.add_rule(Production("G", "GG", 0.5))
        assert grammar.is_stochastic
        grammar.add_rule(Production("H", "HH"))
        assert grammar.is_stochastic
        grammar.clear()
        assert not grammar.is_stochastic


class TestGrammarSettings:
    def test_clear(self) -> None:
        grammar = plant_grammar(XorShift128(0))
        grammar.generate(2)
        grammar.clear()
        assert grammar.root == ""
        assert grammar.rules == {}
        assert grammar.generation_count == 0
        assert grammar.result is None
        assert grammar.generate(3).symbols == ""

    def test_set_root_overwrites(self) -> None:
        grammar = Grammar(XorShift128(0))
        grammar.set_root("F")
        grammar.set_root(["X", "Y"])
        assert grammar.root == "XY"

    def test_rules_keep_insertion_order(self) -> None:
        grammar = Grammar(XorShift128(0))
        grammar.add_rule(("F", "B", 0.5))
        grammar.add_rule(Production("X", "XX"))
        grammar.add_rule(("F", "A", 0.5))
        rules = grammar.rules
        assert list(rules) == ["F", "X"]
        assert [p.rhs for p in rules["F"]] == ["B", "A"]
        assert rules["X"][0].probability == 1.0

    def test_sequence_rhs_stored_as_string(self) -> None:
        grammar = Grammar(XorShift128(0))
        grammar.set_root(["F"])
        grammar.add_rule(Production("F", ["F", "+", "F"]))
        result = grammar.generate(1)
        assert result.symbols == "F+F"
        assert grammar.rules["F"][0].rhs == "F+F"
        assert result.rule_summary == "Root is F\nF → F+F\n"

    def test_multi_symbol_lhs_rejected(self) -> None:
        with pytest.raises(ValueError):
            Grammar(XorShift128(0)).add_rule(Production("FF", "F"))

    def test_rule_summary_deterministic(self) -> None:
        grammar = build_grammar(KNOWN_LSYSTEMS["plant_d"], XorShift128(0))
        assert grammar.rule_summary() == (
            "Root is X\n"
            "X → F[+X]F[-X]+X\n"
            "F → FF\n")

    def test_rule_summary_stochastic(self) -> None:
        result = build_grammar(KNOWN_LSYSTEMS["branching"],
                               XorShift128(0)).generate(0)
        assert isinstance(result, GenerationResult)
        assert result.rule_summary == (
            "Root is F\n"
            "F → F[+F]F[-F]F (0.33)\n"
            "F → F[+F]F (0.33)\n"
            "F → F[-F]F (0.34)\n")


class TestDescriptors:
    def test_origin_without_canvas(self) -> None:
        desc = make_descriptor(KNOWN_LSYSTEMS["plant_a"])
        assert desc.start_point == (0.0, 0.0)
        assert desc.angle_step == pytest.approx(np.radians(22.7))
        assert desc.segment_length == 8.0
        assert desc.stroke_width == 1.0

    def test_bottom_anchor(self) -> None:
        desc = make_descriptor(KNOWN_LSYSTEMS["plant_a"], (800, 600), 2.0)
        assert desc.start_point == (400.0, 600.0 - BOTTOM_MARGIN)
        assert desc.stroke_width == 2.0

    def test_middle_anchor(self) -> None:
        desc = make_descriptor(KNOWN_LSYSTEMS["hexagonal_gosper"], (800, 600))
        assert desc.start_point == (400.0, 300.0)

    def test_branching_angle_in_radians(self) -> None:
        desc = make_descriptor(KNOWN_LSYSTEMS["branching"])
        assert desc.angle_step == pytest.approx(0.37)

    def test_custom_draw_chars(self) -> None:
        lsys = LSystem(root="A", rules=[], generations=0, turn_angle_deg=60,
                       segment_length=1.0, draw_chars="AB")
        assert make_descriptor(lsys).draw_chars == "AB"


class TestCommandLine:
    def test_list(self, capsys) -> None:
        main(["-l"])
        out = capsys.readouterr().out.split()
        assert "plant_a" in out
        assert "branching" in out

    def test_text_output(self, tmp_path, capsys) -> None:
        filename = str(tmp_path / "segs.txt")
        main(["plant_a", "-n", "1", "-t", "-o", filename])
        segments = load_segments(filename)
        assert segments.shape == (5, 2, 2)
        assert "generated 5 segments" in capsys.readouterr().out

    def test_png_output(self, tmp_path) -> None:
        filename = str(tmp_path / "plant.png")
        main(["plant_b", "-n", "2", "-o", filename])
        assert os.path.getsize(filename) > 0

    def test_fixed_canvas_output(self, tmp_path) -> None:
        filename = str(tmp_path / "plant.png")
        main(["plant_c", "-n", "1", "--canvas", "200x200", "--thick",
              "-o", filename])
        assert os.path.getsize(filename) > 0

    def test_rules_shown(self, tmp_path, capsys) -> None:
        main(["plant_d", "-n", "2", "-r", "-t",
              "-o", str(tmp_path / "s.txt")])
        out = capsys.readouterr().out
        assert "Root is X" in out
        assert "2 generations" in out

    def test_stochastic_variants(self, tmp_path) -> None:
        main(["branching", "-n", "2", "-k", "3", "--seed", "5", "-t",
              "-o", str(tmp_path / "b.txt")])
        for idx in range(3):
            assert (tmp_path / "b_{}.txt".format(idx)).exists()

    def test_variants_of_deterministic_system(self, tmp_path, capsys) -> None:
        main(["plant_a", "-n", "1", "-k", "3", "-t",
              "-o", str(tmp_path / "a.txt")])
        assert "not stochastic" in capsys.readouterr().out
        assert (tmp_path / "a.txt").exists()
        assert not (tmp_path / "a_1.txt").exists()

    def test_max_segments(self, tmp_path, capsys) -> None:
        filename = tmp_path / "s.txt"
        main(["plant_a", "-n", "2", "-x", "3", "-t", "-o", str(filename)])
        assert "exceeded" in capsys.readouterr().out
        assert not filename.exists()

    def test_grammar_file(self, tmp_path) -> None:
        grammar_file = tmp_path / "koch.json"
        grammar_file.write_text(
            '{"root": "F", "rules": {"F": "F-F+F+F-F"}, '
            '"generations": 2, "angle": 90, "length": 4}')
        filename = tmp_path / "koch.txt"
        main(["-f", str(grammar_file), "-t", "-o", str(filename)])
        assert load_segments(str(filename)).shape == (25, 2, 2)

    def test_unknown_lsystem(self) -> None:
        with pytest.raises(SystemExit):
            main(["no_such_thing"])

    def test_bad_canvas(self) -> None:
        with pytest.raises(SystemExit):
            main(["plant_a", "--canvas", "big"])
