"""
Execution tests for the Hack VM translator.

Each test translates VM source, assembles the result with the test-side
Hack assembler and runs it on the Hack CPU emulator, then checks RAM.
Programs without a bootstrap start with the segment pointers below,
the same way the course test scripts set them up.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from vm_translator import translate
from hack_cpu import HackCPU, StopReason, SP, LCL, ARG, THIS, THAT, to_signed

STACK_BASE = 256
INITIAL_POINTERS = {SP: STACK_BASE, LCL: 300, ARG: 400, THIS: 3000, THAT: 3010}


def _run(sources, bootstrap: bool = False):
    """Translate, assemble and run. `sources` is VM text or (name, text) pairs."""
    if isinstance(sources, str):
        sources = [("Test", sources)]
    asm = translate(sources, bootstrap=bootstrap)
    cpu = HackCPU.from_source(asm)
    if not bootstrap:
        for addr, value in INITIAL_POINTERS.items():
            cpu.ram[addr] = value
    reason = cpu.run()
    assert reason is not StopReason.TIMEOUT
    return cpu


# ─── Stack arithmetic ──────────────────────

class TestArithmetic:
    def test_seven_plus_eight(self):
        cpu = _run("push constant 7\npush constant 8\nadd")
        assert cpu.stack() == [15]
        assert cpu.sp == STACK_BASE + 1

    @pytest.mark.parametrize("op, a, b, expected", [
        ("add", 7, 8, 15),
        ("sub", 10, 3, 7),
        ("sub", 3, 10, -7),
        ("sub", 0, 1, -1),
        ("and", 12, 10, 8),
        ("or", 12, 10, 14),
    ])
    def test_binary_operand_order(self, op, a, b, expected):
        cpu = _run(f"push constant {a}\npush constant {b}\n{op}")
        assert cpu.stack() == [expected]

    def test_neg(self):
        assert _run("push constant 5\nneg").stack() == [-5]

    def test_not(self):
        assert _run("push constant 0\nnot").stack() == [-1]
        assert _run("push constant 1\nnot").stack() == [-2]

    @pytest.mark.parametrize("op, a, b, expected", [
        ("eq", 5, 5, -1),
        ("eq", 5, 6, 0),
        ("gt", 7, 3, -1),
        ("gt", 3, 7, 0),
        ("gt", 3, 3, 0),
        ("lt", 3, 7, -1),
        ("lt", 7, 3, 0),
        ("lt", 3, 3, 0),
    ])
    def test_comparison(self, op, a, b, expected):
        cpu = _run(f"push constant {a}\npush constant {b}\n{op}")
        assert cpu.stack() == [expected]

    def test_comparisons_in_two_modules_at_same_index(self):
        src = "push constant 4\npush constant 4\neq\n"
        cpu = _run([("A", src), ("B", src)])
        assert cpu.stack() == [-1, -1]


# ─── Segments ──────────────────────────────

class TestSegments:
    @pytest.mark.parametrize("segment, base", [
        ("local", 300), ("argument", 400), ("this", 3000), ("that", 3010),
    ])
    def test_pop_then_push_based_segment(self, segment, base):
        cpu = _run(f"push constant 42\npop {segment} 2")
        assert cpu.ram[base + 2] == 42
        assert cpu.sp == STACK_BASE
        cpu = _run(f"push constant 42\npop {segment} 2\npush {segment} 2")
        assert cpu.stack() == [42]

    def test_temp(self):
        cpu = _run("push constant 11\npop temp 0\npush constant 12\npop temp 7")
        assert cpu.ram[5] == 11
        assert cpu.ram[12] == 12
        assert cpu.sp == STACK_BASE

    def test_pointer_retargets_this_and_that(self):
        cpu = _run("push constant 5000\npop pointer 1\n"
                   "push constant 9\npop that 2\n"
                   "push pointer 1")
        assert cpu.ram[THAT] == 5000
        assert cpu.ram[5002] == 9
        assert cpu.stack() == [5000]

    def test_static_round_trip(self):
        cpu = _run("push constant 21\npop static 5\npush static 5")
        assert cpu.stack() == [21]

    def test_static_cells_are_per_module(self):
        cpu = _run([("A", "push constant 1\npop static 0"),
                    ("B", "push constant 2\npop static 0\npush static 0")])
        assert cpu.stack() == [2]
        # A.0 and B.0 are the first two assembler variables
        assert cpu.ram[16] == 1
        assert cpu.ram[17] == 2


# ─── Branching ─────────────────────────────

class TestBranching:
    def test_if_goto_falls_through_on_zero(self):
        cpu = _run("push constant 0\nif-goto SKIP\npush constant 1\nlabel SKIP\n"
                   "push constant 2\nif-goto DONE\npush constant 3\nlabel DONE")
        assert cpu.stack() == [1]

    def test_loop_sums_to_ten(self):
        cpu = _run("push constant 0\npop local 0\n"
                   "push constant 4\npop local 1\n"
                   "label LOOP\n"
                   "push local 0\npush local 1\nadd\npop local 0\n"
                   "push local 1\npush constant 1\nsub\npop local 1\n"
                   "push local 1\nif-goto LOOP\n"
                   "push local 0")
        assert cpu.stack() == [10]


# ─── Functions ─────────────────────────────

CALLER_WITH_HALT = "call Foo 0\nlabel END\ngoto END\n"


class TestFunctions:
    def test_call_return_round_trip(self):
        cpu = _run(CALLER_WITH_HALT + "function Foo 0\npush constant 5\nreturn")
        assert cpu.sp == STACK_BASE + 1
        assert cpu.ram[STACK_BASE] == 5
        assert cpu.ram[LCL] == 300
        assert cpu.ram[ARG] == 400
        assert cpu.ram[THIS] == 3000
        assert cpu.ram[THAT] == 3010

    def test_arguments_and_locals(self):
        cpu = _run("push constant 3\npush constant 4\ncall Add 2\n"
                   "label END\ngoto END\n"
                   "function Add 2\n"
                   "push argument 0\npush argument 1\nadd\npop local 1\n"
                   "push local 0\npush local 1\nadd\n"
                   "return")
        assert cpu.stack() == [7]

    def test_locals_start_at_zero(self):
        asm = translate([("Test", CALLER_WITH_HALT
                          + "function Foo 3\npush local 0\npush local 1\nor\n"
                          "push local 2\nor\nreturn")], bootstrap=False)
        cpu = HackCPU.from_source(asm)
        for addr, value in INITIAL_POINTERS.items():
            cpu.ram[addr] = value
        # Foo's locals land just above the 5 saved words
        cpu.ram[261:264] = [7, 7, 7]
        assert cpu.run() is StopReason.HALT
        assert cpu.stack() == [0]

    def test_callee_restores_this_and_that(self):
        cpu = _run(CALLER_WITH_HALT
                   + "function Foo 0\npush constant 7000\npop pointer 0\n"
                   "push constant 8000\npop pointer 1\npush constant 0\nreturn")
        assert cpu.ram[THIS] == 3000
        assert cpu.ram[THAT] == 3010

    def test_recursive_fibonacci_with_bootstrap(self):
        main = ("function Main.fib 0\n"
                "push argument 0\npush constant 2\nlt\nif-goto BASE\n"
                "push argument 0\npush constant 1\nsub\ncall Main.fib 1\n"
                "push argument 0\npush constant 2\nsub\ncall Main.fib 1\n"
                "add\nreturn\n"
                "label BASE\npush argument 0\nreturn\n")
        sys_vm = ("function Sys.init 0\n"
                  "push constant 10\ncall Main.fib 1\n"
                  "label END\ngoto END\n")
        asm = translate([("Main", main), ("Sys", sys_vm)])
        cpu = HackCPU.from_source(asm)
        assert cpu.run() is StopReason.HALT
        assert cpu.top() == 55
        # bootstrap frame (5 words) + Sys.init's single result
        assert cpu.sp == STACK_BASE + 6

    def test_same_label_in_two_functions_resolves_locally(self):
        src = (CALLER_WITH_HALT
               + "function Foo 0\npush constant 1\nif-goto OUT\npush constant 99\nreturn\n"
               "label OUT\ncall Bar 0\nreturn\n"
               "function Bar 0\npush constant 0\nif-goto OUT\npush constant 2\nreturn\n"
               "label OUT\npush constant 98\nreturn\n")
        cpu = _run(src)
        assert cpu.stack() == [2]

    def test_bootstrap_sets_stack_and_enters_sys_init(self):
        asm = translate([("Sys", "function Sys.init 0\npush constant 7\npush constant 8\nadd\n"
                                 "label END\ngoto END\n")])
        cpu = HackCPU.from_source(asm)
        assert cpu.run() is StopReason.HALT
        assert to_signed(cpu.ram[cpu.sp - 1]) == 15
        assert cpu.ram[LCL] == STACK_BASE + 5
        assert cpu.sp == STACK_BASE + 6
