#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Learn the Amplify Token Step by Step

This is a pedagogical walkthrough of the token ledger's lifecycle, from
creation through the crowdsale restriction period to open trading.
Each step builds on the previous one. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3:  Foundation   - Creation, base units, the restriction period
  4-5:  Supply       - Burning, the conservation proof
  6-8:  Delegation   - Ending the restriction, approve/transfer_from, the race guard
  9-10: Observation  - Querying and subscribing to the event log, clones

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass
import sys

from amplify import (
    TokenLedger, TransferEvent, ApprovalEvent, BurnEvent,
    NULL_ACCOUNT, INITIAL_SUPPLY, LedgerError,
    to_base_units,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    owner: str = "0x00000000000000000000000000000000000000a1"
    investor: str = "0x00000000000000000000000000000000000000b2"
    exchange: str = "0x00000000000000000000000000000000000000c3"
    trader: str = "0x00000000000000000000000000000000000000d4"

    # Amounts in whole tokens
    presale_allocation: int = 1_000_000
    burn_unsold: int = 200_000_000
    exchange_allowance: int = 50_000
    exchange_trade: int = 30_000


CONFIG = DemoConfig()

QUICK_MODE = "--quick" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    """Print a step header with learning objective."""
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    """Print a section header within a step."""
    print(f"\n--- {text} ---\n")


def tokens(value: int) -> str:
    """Format a base-unit amount as whole tokens."""
    whole, frac = divmod(value, 10 ** 18)
    if frac == 0:
        return f"{whole:,} AMPX"
    return f"{whole:,}.{str(frac).zfill(18).rstrip('0')} AMPX"


def attempt(label: str, fn, *args):
    """Run a ledger call, reporting a rejection instead of stopping the tutorial."""
    print(f">>> {label}")
    try:
        fn(*args)
    except LedgerError as e:
        print(f"    raised {type(e).__name__}")
        return False
    return True


# ============================================================================
# PHASE 1: FOUNDATION (Steps 1-3)
# ============================================================================

def step_01_create_token():
    """Create the ledger and inspect its initial state."""
    step_header(1, "Creating the Token",
        "See that the creator holds the whole supply and administers the token.")

    print("""
    The token ledger tracks three things:

    1. BALANCES   - How many base units each account holds
    2. ALLOWANCES - How much a spender may move on an owner's behalf
    3. SUPPLY     - How many base units exist in total

    The creator receives all 1.2 billion tokens and becomes the administrator.
    Let's create it with verbose=True to see every operation as it happens.
    """)

    wait_for_enter()

    print(">>> ledger = TokenLedger.create(owner)")
    ledger = TokenLedger.create(CONFIG.owner, verbose=True)

    section_header("Initial State")
    print(f"Name / symbol:      {ledger.name} / {ledger.symbol}")
    print(f"Decimals:           {ledger.decimals}")
    print(f"Total supply:       {tokens(ledger.total_supply)}")
    print(f"Owner balance:      {tokens(ledger.balance_of(CONFIG.owner))}")
    print(f"Administrator:      {ledger.administrator}")
    print(f"Restricted:         {ledger.transfer_restricted}")
    print(f"Event log:          {ledger.events.all()}")

    section_header("Key Insight")
    print("""
    Creation is itself recorded as a Transfer FROM the null account.
    Observers replaying the event log see tokens appear exactly once.
    """)

    return ledger


def step_02_base_units(ledger: TokenLedger):
    """Convert whole tokens to base units."""
    step_header(2, "Base Units",
        "Amounts are integers of the smallest unit, 10**-18 of a token.")

    print("""
    The ledger never sees fractions. One token is 10**18 base units, and
    to_base_units() converts whole-token amounts exactly:
    """)

    wait_for_enter()

    for amount in (1, "0.5", "12e8", "1e-18"):
        print(f"to_base_units({amount!r:>8}) = {to_base_units(amount)}")

    section_header("Rejected Inputs")
    for amount in ("1e-19", -1):
        try:
            to_base_units(amount)
        except ValueError as e:
            print(f"to_base_units({amount!r}) -> ValueError: {e}")

    return ledger


def step_03_restriction_period(ledger: TokenLedger):
    """Only the administrator can transfer during the crowdsale."""
    step_header(3, "The Restriction Period",
        "While restricted, the administrator distributes tokens and nobody else can move them.")

    wait_for_enter()

    allocation = to_base_units(CONFIG.presale_allocation)
    attempt("ledger.transfer(owner, investor, allocation)",
            ledger.transfer, CONFIG.owner, CONFIG.investor, allocation)
    attempt("ledger.transfer(investor, trader, 1)",
            ledger.transfer, CONFIG.investor, CONFIG.trader, 1)
    attempt("ledger.end_restriction(investor)",
            ledger.end_restriction, CONFIG.investor)

    section_header("Balances")
    print(f"Owner:    {tokens(ledger.balance_of(CONFIG.owner))}")
    print(f"Investor: {tokens(ledger.balance_of(CONFIG.investor))}")
    print(f"Trader:   {tokens(ledger.balance_of(CONFIG.trader))}")

    section_header("Key Insight")
    print("""
    A rejected call raises and changes nothing: no balance moves and no
    event is appended. Rejections are checked before any mutation.
    """)

    return ledger


# ============================================================================
# PHASE 2: SUPPLY (Steps 4-5)
# ============================================================================

def step_04_burn(ledger: TokenLedger):
    """Burn unsold tokens."""
    step_header(4, "Burning Tokens",
        "Burn removes tokens from a balance AND from the total supply.")

    print("""
    After the crowdsale the owner destroys the unsold allocation.
    Burning is allowed even during the restriction period.
    """)

    wait_for_enter()

    start = len(ledger.events)
    attempt("ledger.burn(owner, unsold)",
            ledger.burn, CONFIG.owner, to_base_units(CONFIG.burn_unsold))

    section_header("Emitted Events")
    for event in ledger.events.since(start):
        print(f"  {event!r}")
    print(f"\nTotal supply is now {tokens(ledger.total_supply)}")

    return ledger


def step_05_conservation(ledger: TokenLedger):
    """Prove that balances add up to the supply."""
    step_header(5, "Conservation Proof",
        "The sum of all balances always equals total supply.")

    wait_for_enter()

    result = ledger.verify_conservation()
    print(">>> ledger.verify_conservation()")
    for key, value in result.items():
        print(f"  {key:16} {value}")

    assert result['valid'], f"Supply drifted by {result['discrepancy']}"
    burned = INITIAL_SUPPLY - ledger.total_supply
    print(f"\nBurned so far: {tokens(burned)}")

    return ledger


# ============================================================================
# PHASE 3: DELEGATION (Steps 6-8)
# ============================================================================

def step_06_end_restriction(ledger: TokenLedger):
    """Open the token to every holder."""
    step_header(6, "Ending the Restriction",
        "The administrator opens transfers once; the flag never returns.")

    wait_for_enter()

    attempt("ledger.end_restriction(owner)", ledger.end_restriction, CONFIG.owner)
    attempt("ledger.transfer(investor, trader, 10 tokens)",
            ledger.transfer, CONFIG.investor, CONFIG.trader, to_base_units(10))
    print(f"\n{ledger!r}")

    return ledger


def step_07_delegated_transfer(ledger: TokenLedger):
    """Approve an exchange and let it spend."""
    step_header(7, "Allowances and transfer_from",
        "An owner approves a spender, who then moves tokens within that limit.")

    wait_for_enter()

    allowance = to_base_units(CONFIG.exchange_allowance)
    trade = to_base_units(CONFIG.exchange_trade)
    attempt("ledger.approve(investor, exchange, allowance)",
            ledger.approve, CONFIG.investor, CONFIG.exchange, allowance)
    attempt("ledger.transfer_from(exchange, investor, trader, trade)",
            ledger.transfer_from, CONFIG.exchange, CONFIG.investor, CONFIG.trader, trade)
    attempt("ledger.transfer_from(exchange, investor, trader, allowance)",
            ledger.transfer_from, CONFIG.exchange, CONFIG.investor, CONFIG.trader, allowance)

    section_header("Remaining Allowance")
    print(f"allowance(investor, exchange) = "
          f"{tokens(ledger.allowance(CONFIG.investor, CONFIG.exchange))}")

    return ledger


def step_08_approval_race(ledger: TokenLedger):
    """Changing a non-zero allowance requires resetting it first."""
    step_header(8, "The Approval Race Guard",
        "A non-zero allowance can only be replaced after setting it to zero.")

    print("""
    If an owner changed an allowance from N to M directly, a spender who
    sees the change coming could spend N first and then M as well.
    The ledger refuses non-zero to non-zero changes.
    """)

    wait_for_enter()

    attempt("ledger.approve(investor, exchange, 5 tokens)",
            ledger.approve, CONFIG.investor, CONFIG.exchange, to_base_units(5))
    attempt("ledger.approve(investor, exchange, 0)",
            ledger.approve, CONFIG.investor, CONFIG.exchange, 0)
    attempt("ledger.approve(investor, exchange, 5 tokens)",
            ledger.approve, CONFIG.investor, CONFIG.exchange, to_base_units(5))

    return ledger


# ============================================================================
# PHASE 4: OBSERVATION (Steps 9-10)
# ============================================================================

def step_09_event_log(ledger: TokenLedger):
    """Query and subscribe to events."""
    step_header(9, "The Event Log",
        "Every applied operation appends events; queries and subscribers read them.")

    wait_for_enter()

    section_header("Counts by Kind")
    for kind in (TransferEvent, ApprovalEvent, BurnEvent):
        print(f"{kind.__name__:14} {len(ledger.events.of_type(kind))}")

    section_header("Live Subscription")
    seen = []
    ledger.events.subscribe(seen.append)
    ledger.verbose = False
    ledger.transfer(CONFIG.trader, NULL_ACCOUNT, 1)
    ledger.events.unsubscribe(seen.append)
    print(f"Subscriber received: {seen}")
    print(f"Null account balance: {ledger.balance_of(NULL_ACCOUNT)} (not burned)")

    return ledger


def step_10_clone(ledger: TokenLedger):
    """Experiment on a clone without touching the original."""
    step_header(10, "Clones",
        "clone() gives an independent ledger for what-if experiments.")

    wait_for_enter()

    sandbox = ledger.clone()
    sandbox.burn(CONFIG.owner, sandbox.balance_of(CONFIG.owner))
    print(f"Original supply: {tokens(ledger.total_supply)}")
    print(f"Sandbox supply:  {tokens(sandbox.total_supply)}")
    print(f"Holders after sandbox burn: {sorted(sandbox.holders())}")


# ============================================================================
# MAIN
# ============================================================================

def main():
    """Run the complete tutorial."""
    print("=" * 70)
    print("       AMPLIFY TOKEN - INTERACTIVE TUTORIAL")
    print("=" * 70)

    if QUICK_MODE:
        print("Running in QUICK mode (no pauses)")
    else:
        print("Running in INTERACTIVE mode (press Enter to advance)")

    wait_for_enter()

    ledger = step_01_create_token()
    wait_for_enter()

    ledger = step_02_base_units(ledger)
    wait_for_enter()

    ledger = step_03_restriction_period(ledger)
    wait_for_enter()

    ledger = step_04_burn(ledger)
    wait_for_enter()

    ledger = step_05_conservation(ledger)
    wait_for_enter()

    ledger = step_06_end_restriction(ledger)
    wait_for_enter()

    ledger = step_07_delegated_transfer(ledger)
    wait_for_enter()

    ledger = step_08_approval_race(ledger)
    wait_for_enter()

    ledger = step_09_event_log(ledger)
    wait_for_enter()

    step_10_clone(ledger)

    print("\n" + "=" * 70)
    print("       TUTORIAL COMPLETE!")
    print("=" * 70)
    print("""
    You've learned:
      - The creator holds the supply and ends the restriction once
      - Rejected calls raise and leave the ledger unchanged
      - Burn shrinks supply; sum of balances always equals supply
      - Allowances must be reset to zero before being changed

    Next steps:
      - Run tests: pytest tests/
    """)


if __name__ == "__main__":
    main()
