"""Tests for ProcessExecution: latched statuses and the step-by-step protocol."""

import time

import pytest

from femexec.build.schema import FemProgram, FemProgramConfig
from femexec.runner.errors import ProcessNotStarted
from femexec.runner.execution import ExecutionStatus, ProcessExecution


def _program(executable):
    return FemProgramConfig(FemProgram.OPENSEES, executable)


class TestExecutionStatus:

    def test_flags_start_false(self):
        st = ExecutionStatus()
        assert not st.process_died
        assert not st.process_errored
        assert not st.step_executed
        assert st.last_step is None

    def test_flags_latch(self):
        st = ExecutionStatus()
        st.process_died = True
        st.process_died = False
        st.process_errored = True
        st.process_errored = False
        st.step_executed = True
        st.step_executed = False
        assert st.process_died
        assert st.process_errored
        assert st.step_executed

    def test_reset_step_only_clears_step(self):
        st = ExecutionStatus()
        st.process_errored = True
        st.step_executed = True
        st.reset_step()
        assert not st.step_executed
        assert st.process_errored


class TestLaunch:

    def test_default_label_is_program_name(self, python_exe, tmp_path):
        ex = ProcessExecution(_program(python_exe), str(tmp_path), dynamic=True)
        assert ex.process.cmd == [python_exe, "OPENSEES"]

    def test_launch_failure_returns_false(self, missing_exe, tmp_path):
        ex = ProcessExecution(_program(missing_exe), str(tmp_path), dynamic=True)
        assert ex.start() is False
        assert not ex.started
        assert ex.response_monitor is None
        assert ex.error_monitor is None
        ex.check_step_completion()
        ex.check_for_errors()
        assert not ex.statuses.step_executed
        assert not ex.statuses.process_errored
        ex.abort()

    def test_checks_before_start_are_noops(self, python_exe, tmp_path):
        ex = ProcessExecution(_program(python_exe), str(tmp_path), dynamic=True)
        ex.check_step_completion(timeout=0.1)
        ex.check_for_errors(timeout=0.1)
        ex.check_if_process_is_alive()
        assert not ex.statuses.step_executed
        assert not ex.statuses.process_errored
        assert not ex.statuses.process_died

    def test_send_step_requires_start(self, python_exe, tmp_path):
        ex = ProcessExecution(_program(python_exe), str(tmp_path), dynamic=True)
        with pytest.raises(ProcessNotStarted):
            ex.send_step("Execute Step 1")

    def test_send_step_requires_dynamic(self, python_exe, tmp_path):
        ex = ProcessExecution(_program(python_exe), str(tmp_path), dynamic=False,
                              label="-c")
        with pytest.raises(ProcessNotStarted):
            ex.send_step("Execute Step 1")
        ex.send_exit()


class TestDynamicRun:

    def test_ten_steps(self, python_exe, echo_solver, tmp_path):
        ex = ProcessExecution(_program(python_exe), str(tmp_path), wait_ms=200,
                              dynamic=True, label=echo_solver)
        assert ex.start()
        st = ex.statuses
        try:
            for s in range(1, 11):
                st.reset_step()
                ex.send_step("Execute Step {}".format(s))
                for _ in range(6):
                    ex.check_step_completion(timeout=1.0)
                    if st.step_executed:
                        break
                assert st.step_executed, "no response to step {}".format(s)
                assert str(s) in st.last_step
                ex.check_for_errors()
                ex.check_if_process_is_alive()
                assert not st.process_errored
                assert not st.process_died
        finally:
            ex.send_exit()
            ex.abort()
        assert not ex.process.is_alive()

    def test_step_latch_holds_until_reset(self, python_exe, echo_solver, tmp_path):
        ex = ProcessExecution(_program(python_exe), str(tmp_path), wait_ms=200,
                              dynamic=True, label=echo_solver)
        assert ex.start()
        try:
            ex.send_step("Execute Step 1")
            ex.check_step_completion(timeout=5.0)
            assert ex.statuses.last_step == "Completed Execute Step 1"
            ex.send_step("Execute Step 2")
            time.sleep(0.5)
            ex.check_step_completion(timeout=1.0)
            # latched: the second line stays queued until the caller resets
            assert ex.statuses.last_step == "Completed Execute Step 1"
            ex.statuses.reset_step()
            ex.check_step_completion(timeout=5.0)
            assert ex.statuses.last_step == "Completed Execute Step 2"
        finally:
            ex.send_exit()
            ex.abort()

    def test_stderr_latches_errored(self, python_exe, echo_solver, tmp_path):
        ex = ProcessExecution(_program(python_exe), str(tmp_path), wait_ms=200,
                              dynamic=True, label=echo_solver)
        assert ex.start()
        try:
            ex.send_step("fail step 1")
            ex.check_for_errors(timeout=5.0)
            assert ex.statuses.process_errored
            ex.send_step("Execute Step 2")
            ex.check_step_completion(timeout=5.0)
            assert ex.statuses.step_executed
            assert ex.statuses.process_errored
        finally:
            ex.send_exit()
            ex.abort()

    def test_exit_latches_died(self, python_exe, echo_solver, tmp_path):
        ex = ProcessExecution(_program(python_exe), str(tmp_path), wait_ms=100,
                              dynamic=True, label=echo_solver)
        assert ex.start()
        ex.send_exit()
        deadline = time.time() + 10.0
        while not ex.statuses.process_died and time.time() < deadline:
            ex.check_if_process_is_alive()
            time.sleep(0.05)
        assert ex.statuses.process_died
        ex.abort()
        ex.check_if_process_is_alive()
        assert ex.statuses.process_died
