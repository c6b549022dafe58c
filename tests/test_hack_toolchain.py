"""
Smoke tests for the test-side Hack assembler and CPU emulator.

The execution tests in test_simulation.py rely on these two helpers,
so their encodings are checked against the Hack machine language
reference first.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from hack_assembler import COMP, AssemblerError, HackAssembler, assemble
from hack_cpu import HackCPU, StopReason, alu


class TestEncoding:
    def test_a_instruction(self):
        assert assemble("@2\n@32767") == [2, 32767]

    def test_c_instructions(self):
        cases = [
            ("D=A",   0xEC10),
            ("M=D+M", 0xF088),
            ("0;JMP", 0xEA87),
            ("D;JGT", 0xE301),
            ("AM=M-1", 0xFCA8),
        ]
        for text, expected in cases:
            assert assemble(text) == [expected], text

    def test_commutative_spelling(self):
        assert assemble("M=M+D") == assemble("M=D+M")

    def test_predefined_symbols(self):
        assert assemble("@SP\n@LCL\n@ARG\n@THIS\n@THAT\n@R13\n@SCREEN\n@KBD") == [
            0, 1, 2, 3, 4, 13, 0x4000, 0x6000]

    def test_labels_and_variables(self):
        asm = HackAssembler()
        words = asm.assemble("@foo\n(LOOP)\n@bar\n@LOOP\n0;JMP\n@foo")
        assert words == [16, 17, 1, 0xEA87, 16]
        assert asm.symbols["LOOP"] == 1

    def test_comments_and_blank_lines(self):
        assert assemble("// push\n\n  @7  // seven\n  D=A\n") == [7, 0xEC10]

    @pytest.mark.parametrize("source", [
        "D=Q", "D;JXX", "X=D", "@32768", "(L)\n(L)",
    ])
    def test_errors(self, source):
        with pytest.raises(AssemblerError):
            assemble(source)


class TestExecution:
    def test_alu(self):
        assert alu(5, 3, COMP["D-A"] & 0b111111) == 2
        assert alu(5, 3, COMP["D+A"] & 0b111111) == 8
        assert alu(5, 3, COMP["-1"] & 0b111111) == 0xFFFF

    def test_store_and_end(self):
        cpu = HackCPU.from_source("@5\nD=A\n@0\nM=D")
        assert cpu.run() is StopReason.END
        assert cpu.ram[0] == 5

    def test_halt_loop(self):
        cpu = HackCPU.from_source("@1\nD=A\n(END)\n@END\n0;JMP")
        assert cpu.run() is StopReason.HALT
        assert cpu.D == 1

    def test_timeout(self):
        cpu = HackCPU.from_source("(A)\n@B\n0;JMP\n(B)\n@A\n0;JMP")
        assert cpu.run(max_cycles=100) is StopReason.TIMEOUT

    def test_conditional_jump(self):
        cpu = HackCPU.from_source("@3\nD=A\n@SKIP\nD;JGT\n@99\nD=A\n(SKIP)\n@0\nM=D")
        cpu.run()
        assert cpu.ram[0] == 3
