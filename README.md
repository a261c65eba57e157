# orogen

In-memory state machines for three pieces of chain governance: operator
slashing, council-approved treasury spends, and stake-weighted Yuma scoring of
operators by a validator set.

## Modules

- `orogen.frame`: the shared runtime pieces. `Origin.root()` and
  `Origin.signed(account)` say who is calling. `ensure_root` and
  `ensure_signed` raise `BadOrigin` when the origin is the wrong kind.
  `System` holds the current `block_number` and an `events` list that every
  call appends to.
- `orogen.slashing`: `Slashing` moves each slash through
  `PENDING -> DISPUTED -> ARBITRATED -> RATIFIED -> FINALIZED`. An overturned
  ratification finalizes the slash at once and releases the freeze. An
  undisputed `PENDING` slash can be finalized once `dispute_window` blocks have
  passed. Each `FaultCode` has a `base_severity_bps()`. The economic effect
  goes to an `OperatorSlash` hook. The base class keeps `frozen` and `applied`
  in memory. `NullOperatorSlash` only counts the calls it receives.
- `orogen.treasury`: `Treasury` records spend proposals from council members.
  A proposal becomes `ProposalState.EXECUTED` once `threshold` distinct
  members have approved it. A member may approve a proposal only once, and a
  proposal holds at most 32 approvals.
- `orogen.yuma_registry`: `ValidatorRegistry` keeps validator membership,
  the total stake and the stake of each entity. Once enough entities are
  active, it enforces an entity concentration cap. `YumaConfig` holds the
  bounds.
- `orogen.yuma`: `YumaConsensus` manages membership and epoch permits.
  `rotate_permits` grants permits to the top-staked validators, with ties
  broken by encoded account id. It also takes weight submissions and computes
  the incentives. Each score is clipped to the lower median for its operator
  and weighted by the stake the validator had when its permit was granted.
  Shares are in basis points.
- `orogen.weights` and `orogen.yuma_weights`: `Weight` (saturating reference
  time and proof size) and `DbWeight`, plus the per-call estimates
  `TreasuryWeightInfo`, `SlashingWeightInfo` and `YumaWeightInfo`. Database
  costs are added when a `DbWeight` is supplied.

## Install

```
pip install .
```

## Examples

Treasury:

```python
from orogen.frame import Origin, System
from orogen.treasury import Treasury, ProposalState, AlreadyApproved

system = System()
system.set_block_number(1)
treasury = Treasury(system, council={1, 2, 3}, threshold=2)

treasury.propose_spend(Origin.signed(1), beneficiary=42, amount=1_000)
treasury.execute_spend(Origin.signed(2), 0)
try:
    treasury.execute_spend(Origin.signed(2), 0)
except AlreadyApproved:
    pass
treasury.execute_spend(Origin.signed(3), 0)
assert treasury.proposal(0).state is ProposalState.EXECUTED
```

Slashing:

```python
from orogen.frame import Origin, System
from orogen.slashing import FaultCode, OperatorSlash, Slashing, SlashState

system = System()
system.set_block_number(1)
hook = OperatorSlash()
slashing = Slashing(system, operator_slash=hook, dispute_window=10)

slash_id = slashing.submit_slashing_evidence(
    Origin.root(), 42, FaultCode.WRONG_MODEL, bytes(32)
)
assert 42 in hook.frozen
system.set_block_number(11)
slashing.finalize_slash(Origin.root(), slash_id)
assert slashing.slash(slash_id).state is SlashState.FINALIZED
assert hook.applied == [(42, 1000, FaultCode.WRONG_MODEL)]
```

Yuma scoring:

```python
from orogen.frame import Origin, System
from orogen.yuma import YumaConsensus

yuma = YumaConsensus(System())
yuma.add_validator(Origin.root(), 1, 100, 1)
yuma.add_validator(Origin.root(), 2, 100, 2)
yuma.rotate_permits(Origin.root(), 7)
yuma.submit_weights(Origin.signed(1), 7, [(100, 1000), (101, 2000)])
yuma.submit_weights(Origin.signed(2), 7, [(100, 500), (101, 1000)])
yuma.compute_epoch_incentives(Origin.root(), 7)
assert yuma.epoch_incentive(7, 100) == 3333
assert yuma.epoch_incentive(7, 101) == 6666
```

## Errors

A call refused by the state machine raises a subclass of
`orogen.frame.DispatchError`: `BadOrigin`, or a module-specific error such
as `NotSlashOperator`, `ThresholdNotSet` or `EntityStakeCapExceeded`.
Malformed arguments raise `ValueError`, for example an evidence hash that is
not 32 bytes or a score outside 0..=65535. A call that raises changes no
state.

## What this package does not do

All state lives in Python objects and nothing is persisted. The treasury only
records approvals and never moves funds. The slashing hook does not hold real
stake unless you supply an `OperatorSlash` subclass that does. There is no
networking, block production or command-line tool. The weight classes only
produce estimates and nothing enforces them.

## Tests

```
pip install .[test]
pytest
```