import pytest

from rspcore.pipeline import (
    Branch,
    BranchState,
    OpFlags,
    OpInfo,
    Pipeline,
    Stage,
    can_dual_issue,
)


def run(pipeline, *ops):
    pipeline.begin()
    for op in ops:
        pipeline.issue(op)
    pipeline.end()
    return pipeline.clocks


def base_clocks():
    return run(Pipeline(), OpInfo())


@pytest.mark.parametrize(
    "flag, predicate",
    [
        (OpFlags.LOAD, "load"),
        (OpFlags.STORE, "store"),
        (OpFlags.BRANCH, "branch"),
        (OpFlags.VECTOR, "vector"),
        (OpFlags.BYPASS, "bypass"),
    ],
)
def test_opinfo_predicates(flag, predicate):
    assert getattr(OpInfo(flags=flag), predicate)() is True
    assert getattr(OpInfo(), predicate)() is False


def test_dual_issue_needs_one_scalar_and_one_vector():
    scalar = OpInfo()
    vector = OpInfo(flags=OpFlags.VECTOR)
    assert can_dual_issue(scalar, vector) is True
    assert can_dual_issue(vector, scalar) is True
    assert can_dual_issue(scalar, scalar) is False
    assert can_dual_issue(vector, vector) is False


def test_dual_issue_blocked_by_vector_register_conflict():
    producer = OpInfo(v_def=1 << 4)
    assert can_dual_issue(producer, OpInfo(flags=OpFlags.VECTOR, v_use=1 << 4)) is False
    assert can_dual_issue(producer, OpInfo(flags=OpFlags.VECTOR, v_def=1 << 4)) is False
    assert can_dual_issue(producer, OpInfo(flags=OpFlags.VECTOR, v_use=1 << 5)) is True


def test_dual_issue_blocked_by_control_register_conflict():
    producer = OpInfo(vc_def=1)
    assert can_dual_issue(producer, OpInfo(flags=OpFlags.VECTOR, vc_use=1)) is False
    assert can_dual_issue(producer, OpInfo(flags=OpFlags.VECTOR, vc_use=2)) is True


def test_fake_use_conflicts_unless_only_second_is_vnop_group():
    producer = OpInfo(v_def=1 << 7)
    plain = OpInfo(flags=OpFlags.VECTOR, vfake=1 << 7)
    vnop = OpInfo(flags=OpFlags.VECTOR | OpFlags.VNOP_GROUP, vfake=1 << 7)
    grouped_producer = OpInfo(flags=OpFlags.VNOP_GROUP, v_def=1 << 7)
    assert can_dual_issue(producer, plain) is False
    assert can_dual_issue(producer, vnop) is True
    assert can_dual_issue(grouped_producer, vnop) is False


def test_end_retires_issue_into_previous_stage():
    pipeline = Pipeline()
    run(pipeline, OpInfo(flags=OpFlags.LOAD, r_def=0b1010, v_def=0b100))
    assert pipeline.previous[0] == Stage(load=True, r_write=0b1010, v_write=0b100)
    assert pipeline.previous[1] == Stage()
    assert pipeline.current.r_write == 0


def test_end_without_hazards_takes_one_stage():
    assert base_clocks() == Pipeline.STAGE_CLOCKS


def test_stall_inserts_empty_stage():
    pipeline = Pipeline()
    run(pipeline, OpInfo(r_def=0b10))
    pipeline.begin()
    pipeline.stall()
    assert pipeline.previous[0] == Stage()
    assert pipeline.previous[1].r_write == 0b10
    assert pipeline.clocks == Pipeline.STAGE_CLOCKS


def gpr_hazard_clocks(gap):
    pipeline = Pipeline()
    run(pipeline, OpInfo(r_def=1 << 3))
    for _ in range(gap):
        run(pipeline, OpInfo())
    return run(pipeline, OpInfo(r_use=1 << 3))


def test_gpr_hazard_shrinks_with_distance():
    base = base_clocks()
    assert gpr_hazard_clocks(0) > gpr_hazard_clocks(1) > base
    assert gpr_hazard_clocks(2) == base
    assert gpr_hazard_clocks(0) - base == 2 * Pipeline.STAGE_CLOCKS


def test_zero_register_and_bypass_writes_do_not_stall():
    base = base_clocks()
    pipeline = Pipeline()
    run(pipeline, OpInfo(r_def=1))
    assert run(pipeline, OpInfo(r_use=1)) == base
    pipeline = Pipeline()
    run(pipeline, OpInfo(flags=OpFlags.BYPASS, r_def=1 << 2))
    assert run(pipeline, OpInfo(r_use=1 << 2)) == base


def vr_hazard_clocks(gap):
    pipeline = Pipeline()
    run(pipeline, OpInfo(v_def=1 << 9))
    for _ in range(gap):
        run(pipeline, OpInfo())
    return run(pipeline, OpInfo(v_use=1 << 9))


def test_vector_hazard_shrinks_with_distance():
    base = base_clocks()
    assert vr_hazard_clocks(0) > vr_hazard_clocks(1) > vr_hazard_clocks(2) > base
    assert vr_hazard_clocks(3) == base
    assert vr_hazard_clocks(0) - base == 3 * Pipeline.STAGE_CLOCKS


def test_store_waits_for_load_two_stages_back():
    base = base_clocks()
    pipeline = Pipeline()
    run(pipeline, OpInfo(flags=OpFlags.LOAD))
    assert run(pipeline, OpInfo(flags=OpFlags.STORE)) == base

    pipeline = Pipeline()
    run(pipeline, OpInfo(flags=OpFlags.LOAD))
    run(pipeline, OpInfo())
    assert run(pipeline, OpInfo(flags=OpFlags.STORE)) > base
    assert pipeline.previous[1].load is False


def test_branch_forces_single_issue():
    pipeline = Pipeline()
    run(pipeline, OpInfo(flags=OpFlags.BRANCH))
    assert pipeline.single_issue is True
    run(pipeline, OpInfo())
    assert pipeline.single_issue is False


def test_branch_state_transitions():
    branch = Branch()
    assert branch.state is BranchState.STEP
    branch.take(0x1234)
    assert branch.state is BranchState.TAKE
    assert branch.pc == 0x1234 & 0xFFF
    assert branch.in_delay_slot() is False
    branch.delay_slot()
    assert branch.in_delay_slot() is True
    branch.reset()
    assert branch.state is BranchState.STEP
    assert branch.pc == 0x1234 & 0xFFF