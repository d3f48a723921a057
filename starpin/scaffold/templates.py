"""Template text for generated Star Frame projects.

Every template is a set of ``str.format`` strings keyed by the path they are
written to.  Available variables: ``project_name``, ``snake_name``,
``pascal_name``, ``upper_name``, ``program_id`` and one ``*_version`` per
dependency (see :func:`starpin.scaffold.project.template_variables`).
Literal braces in Rust and TOML are doubled.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Files shared by every template
# ---------------------------------------------------------------------------

_STARPIN_TOML = """\
[toolchain]

[features]
resolution = true
skip-lint = false

[programs.localnet]
{snake_name} = "{program_id}"

[programs.devnet]
{snake_name} = "{program_id}"

[programs.mainnet]
{snake_name} = "{program_id}"

[registry]
url = "https://api.apr.dev"

[provider]
cluster = "localnet"
wallet = "~/.config/solana/id.json"

[scripts]
build = "starpin build"
test = "starpin test"
deploy = "starpin deploy"
"""

_GITIGNORE = """\
# Rust
target/
Cargo.lock

# Solana
keypairs/
.anchor/

# IDEs
.vscode/
.idea/

# OS
.DS_Store
Thumbs.db

# Environment
.env
"""

COMMON_FILES: dict[str, str] = {
    "Starpin.toml": _STARPIN_TOML,
    ".gitignore": _GITIGNORE,
}

# ---------------------------------------------------------------------------
# counter
# ---------------------------------------------------------------------------

_COUNTER_CARGO = """\
[package]
name = "{project_name}"
version = "0.1.0"
edition = "2021"
description = "A Star Frame counter program"

[dependencies]
star_frame = {{ version = "{star_frame_version}", features = ["idl"] }}
bytemuck = {{ version = "{bytemuck_version}", features = ["derive"] }}
borsh = {{ version = "{borsh_version}", features = ["derive"] }}
anyhow = "1.0"

[lib]
crate-type = ["cdylib", "lib"]

[features]
default = []
test_helpers = ["star_frame/test_helpers"]
idl = ["star_frame/idl"]

[dev-dependencies]
tokio = {{ version = "1.0", features = ["macros", "rt-multi-thread"] }}
"""

_COUNTER_LIB = """\
use star_frame::{{
    anyhow::bail,
    derive_more::{{self, Deref, DerefMut}},
    empty_star_frame_instruction,
    prelude::*,
}};

#[derive(StarFrameProgram)]
#[program(
    instruction_set = {pascal_name}InstructionSet,
    id = "{program_id}"
)]
pub struct {pascal_name}Program;

#[derive(InstructionSet)]
pub enum {pascal_name}InstructionSet {{
    Create{pascal_name}(Create{pascal_name}Ix),
    UpdateSigner(Update{pascal_name}SignerIx),
    Count(CountIx),
    Close{pascal_name}(Close{pascal_name}Ix),
}}

#[derive(Align1, Pod, Zeroable, Default, Copy, Clone, Debug, Eq, PartialEq, ProgramAccount)]
#[program_account(seeds = {pascal_name}AccountSeeds)]
#[repr(C, packed)]
pub struct {pascal_name}Account {{
    pub version: u8,
    pub owner: Pubkey,
    pub signer: Pubkey,
    pub count: u64,
    pub bump: u8,
}}

#[derive(AccountSet, Deref, DerefMut, Debug)]
pub struct Wrapped{pascal_name}(#[single_account_set] Account<{pascal_name}Account>);

#[derive(Debug, GetSeeds, Clone)]
#[get_seeds(seed_const = b"{upper_name}")]
pub struct {pascal_name}AccountSeeds {{
    pub owner: Pubkey,
}}

#[derive(BorshSerialize, BorshDeserialize, Debug, InstructionArgs)]
pub struct Create{pascal_name}Ix {{
    #[ix_args(&run)]
    pub start_at: Option<u64>,
}}

#[derive(AccountSet)]
pub struct Create{pascal_name}Accounts {{
    #[validate(funder)]
    pub funder: Signer<Mut<SystemAccount>>,
    pub owner: SystemAccount,
    #[validate(arg = (
        CreateIfNeeded(()),
        Seeds({pascal_name}AccountSeeds {{ owner: *self.owner.pubkey() }}),
    ))]
    pub counter: Init<Seeded<Wrapped{pascal_name}>>,
    pub system_program: Program<System>,
}}

impl StarFrameInstruction for Create{pascal_name}Ix {{
    type ReturnType = ();
    type Accounts<'b, 'c> = Create{pascal_name}Accounts;

    fn process(
        accounts: &mut Self::Accounts<'_, '_>,
        start_at: Self::RunArg<'_>,
        _ctx: &mut Context,
    ) -> Result<Self::ReturnType> {{
        **accounts.counter.data_mut()? = {pascal_name}Account {{
            version: 0,
            signer: *accounts.owner.pubkey(),
            owner: *accounts.owner.pubkey(),
            bump: accounts.counter.access_seeds().bump,
            count: start_at.unwrap_or(0),
        }};
        Ok(())
    }}
}}

#[derive(BorshSerialize, BorshDeserialize, Debug, InstructionArgs)]
#[ix_args(&run)]
pub struct Update{pascal_name}SignerIx;

#[derive(AccountSet, Debug)]
#[validate(extra_validation = self.validate())]
pub struct Update{pascal_name}SignerAccounts {{
    pub signer: Signer<SystemAccount>,
    pub new_signer: SystemAccount,
    pub counter: Mut<Account<{pascal_name}Account>>,
}}

impl Update{pascal_name}SignerAccounts {{
    fn validate(&self) -> Result<()> {{
        if *self.signer.pubkey() != self.counter.data()?.signer {{
            bail!("Incorrect signer");
        }}
        Ok(())
    }}
}}

impl StarFrameInstruction for Update{pascal_name}SignerIx {{
    type ReturnType = ();
    type Accounts<'b, 'c> = Update{pascal_name}SignerAccounts;

    fn process(
        accounts: &mut Self::Accounts<'_, '_>,
        _run_arg: Self::RunArg<'_>,
        _ctx: &mut Context,
    ) -> Result<Self::ReturnType> {{
        let mut counter = accounts.counter.data_mut()?;
        counter.signer = *accounts.new_signer.pubkey();
        Ok(())
    }}
}}

#[derive(BorshSerialize, BorshDeserialize, Debug, Copy, Clone, InstructionArgs)]
#[ix_args(run)]
pub struct CountIx {{
    pub amount: u64,
    pub subtract: bool,
}}

#[derive(AccountSet, Debug)]
#[validate(extra_validation = self.validate())]
pub struct CountAccounts {{
    pub owner: Signer<SystemAccount>,
    pub counter: Mut<Account<{pascal_name}Account>>,
}}

impl CountAccounts {{
    fn validate(&self) -> Result<()> {{
        if *self.owner.pubkey() != self.counter.data()?.owner {{
            bail!("Incorrect owner");
        }}
        Ok(())
    }}
}}

impl StarFrameInstruction for CountIx {{
    type ReturnType = ();
    type Accounts<'b, 'c> = CountAccounts;

    fn process(
        accounts: &mut Self::Accounts<'_, '_>,
        CountIx {{ amount, subtract }}: Self::RunArg<'_>,
        _ctx: &mut Context,
    ) -> Result<Self::ReturnType> {{
        let mut counter = accounts.counter.data_mut()?;
        counter.count = if subtract {{
            counter.count.checked_sub(amount).ok_or_else(|| anyhow::anyhow!("Underflow"))?
        }} else {{
            counter.count.checked_add(amount).ok_or_else(|| anyhow::anyhow!("Overflow"))?
        }};
        Ok(())
    }}
}}

#[derive(BorshSerialize, BorshDeserialize, Debug, InstructionArgs)]
pub struct Close{pascal_name}Ix;

#[derive(AccountSet, Debug)]
pub struct Close{pascal_name}Accounts {{
    #[validate(address = &self.counter.data()?.signer)]
    pub signer: Signer<SystemAccount>,
    #[validate(recipient)]
    pub counter: Mut<Wrapped{pascal_name}>,
    #[validate(recipient)]
    pub funds_to: Mut<SystemAccount>,
}}
empty_star_frame_instruction!(Close{pascal_name}Ix, Close{pascal_name}Accounts);
"""

_COUNTER_TESTS = """\
use {snake_name}::*;

#[cfg(test)]
mod tests {{
    use super::*;

    #[test]
    fn test_{snake_name}_initialization() {{
        println!("{pascal_name} initialization test");
    }}

    #[test]
    fn test_{snake_name}_count() {{
        println!("{pascal_name} count test");
    }}

    #[test]
    fn test_authority_validation() {{
        println!("Authority validation test");
    }}

    #[cfg(feature = "idl")]
    #[test]
    fn generate_idl() -> star_frame::Result<()> {{
        let idl = {pascal_name}Program::program_to_idl()?;
        let idl_json = star_frame::serde_json::to_string_pretty(&idl)?;
        std::fs::write("idl.json", &idl_json)?;
        Ok(())
    }}
}}
"""

_COUNTER_README = """\
# {project_name} - Star Frame Counter Program

A counter program built with the Star Frame framework for Solana.

## Getting Started

```bash
starpin build
starpin test
starpin deploy --network devnet
```

## Program Structure

- `{pascal_name}Account`: program account storing owner, signer and count
- `Create{pascal_name}`: initialize a new counter
- `Count`: add to or subtract from the counter
- `Close{pascal_name}`: close the counter and reclaim rent

## Program ID

```
{program_id}
```

Keep `src/lib.rs` and `Starpin.toml` in agreement with `starpin sync`.
"""

# ---------------------------------------------------------------------------
# simple_counter
# ---------------------------------------------------------------------------

_SIMPLE_CARGO = """\
[package]
name = "{project_name}"
version = "0.1.0"
edition = "2021"
description = "A simple Star Frame counter program"

[dependencies]
star_frame = {{ version = "{star_frame_version}", features = ["idl"] }}
bytemuck = {{ version = "{bytemuck_version}", features = ["derive"] }}
borsh = {{ version = "{borsh_version}", features = ["derive"] }}
anyhow = "1.0"

[lib]
crate-type = ["cdylib", "lib"]

[features]
default = []
test_helpers = ["star_frame/test_helpers"]
idl = ["star_frame/idl"]

[dev-dependencies]
tokio = {{ version = "1.0", features = ["macros", "rt-multi-thread"] }}
"""

_SIMPLE_LIB = """\
use star_frame::{{anyhow::ensure, prelude::*}};

#[derive(StarFrameProgram)]
#[program(
    instruction_set = CounterInstructionSet,
    id = "{program_id}"
)]
pub struct CounterProgram;

#[derive(InstructionSet)]
pub enum CounterInstructionSet {{
    Initialize(Initialize),
    Increment(Increment),
}}

#[derive(Align1, Pod, Zeroable, Default, Copy, Clone, Debug, Eq, PartialEq, ProgramAccount)]
#[program_account(seeds = CounterSeeds)]
#[repr(C, packed)]
pub struct CounterAccount {{
    pub authority: Pubkey,
    pub count: u64,
}}

#[derive(Debug, GetSeeds, Clone)]
#[get_seeds(seed_const = b"COUNTER")]
pub struct CounterSeeds {{
    pub authority: Pubkey,
}}

impl AccountValidate<&Pubkey> for CounterAccount {{
    fn validate_account(self_ref: &Self::Ref<'_>, arg: &Pubkey) -> Result<()> {{
        ensure!(arg == &self_ref.authority, "Incorrect authority");
        Ok(())
    }}
}}

#[derive(BorshSerialize, BorshDeserialize, Debug, InstructionArgs)]
pub struct Initialize {{
    #[ix_args(&run)]
    pub start_at: Option<u64>,
}}

#[derive(AccountSet)]
pub struct InitializeAccounts {{
    #[validate(funder)]
    pub authority: Signer<Mut<SystemAccount>>,
    #[validate(arg = (
        Create(()),
        Seeds(CounterSeeds {{ authority: *self.authority.pubkey() }}),
    ))]
    pub counter: Init<Seeded<Account<CounterAccount>>>,
    pub system_program: Program<System>,
}}

impl StarFrameInstruction for Initialize {{
    type ReturnType = ();
    type Accounts<'b, 'c> = InitializeAccounts;

    fn process(
        accounts: &mut Self::Accounts<'_, '_>,
        start_at: &Option<u64>,
        _ctx: &mut Context,
    ) -> Result<Self::ReturnType> {{
        **accounts.counter.data_mut()? = CounterAccount {{
            authority: *accounts.authority.pubkey(),
            count: start_at.unwrap_or(0),
        }};
        Ok(())
    }}
}}

#[derive(BorshSerialize, BorshDeserialize, Debug, Copy, Clone, InstructionArgs)]
pub struct Increment;

#[derive(AccountSet, Debug)]
pub struct IncrementAccounts {{
    pub authority: Signer,
    #[validate(arg = self.authority.pubkey())]
    pub counter: Mut<ValidatedAccount<CounterAccount>>,
}}

impl StarFrameInstruction for Increment {{
    type ReturnType = ();
    type Accounts<'b, 'c> = IncrementAccounts;

    fn process(
        accounts: &mut Self::Accounts<'_, '_>,
        _run_arg: Self::RunArg<'_>,
        _ctx: &mut Context,
    ) -> Result<Self::ReturnType> {{
        let mut counter = accounts.counter.data_mut()?;
        counter.count += 1;
        Ok(())
    }}
}}
"""

_SIMPLE_TESTS = """\
use {snake_name}::*;

#[cfg(test)]
mod tests {{
    use super::*;

    #[test]
    fn test_counter_initialization() {{
        println!("Simple counter initialization test");
    }}

    #[test]
    fn test_counter_increment() {{
        println!("Simple counter increment test");
    }}
}}
"""

_SIMPLE_README = """\
# {project_name}

A minimal Star Frame counter: `Initialize` creates a PDA-backed counter owned
by an authority and `Increment` bumps it by one.

## Program ID

```
{program_id}
```
"""

# ---------------------------------------------------------------------------
# marketplace
# ---------------------------------------------------------------------------

_MARKET_CARGO = """\
[package]
name = "{project_name}"
version = "0.1.0"
edition = "2021"
description = "A Star Frame marketplace program with order book functionality"

[dependencies]
star_frame = {{ version = "{star_frame_version}", features = ["idl", "test_helpers"] }}
star_frame_spl = {{ version = "{star_frame_version}", features = ["idl"] }}
bytemuck = {{ version = "{bytemuck_version}", features = ["derive"] }}
borsh = {{ version = "{borsh_version}", features = ["derive"] }}
anyhow = "1.0"

[lib]
crate-type = ["cdylib", "lib"]

[features]
default = []
prod = []
no_entrypoint = []
cpi = ["no_entrypoint"]
test_helpers = ["star_frame/test_helpers"]
idl = ["star_frame/idl", "star_frame_spl/idl"]

[dev-dependencies]
tokio = {{ version = "1.0", features = ["macros", "rt-multi-thread"] }}
pretty_assertions = {{ version = "1.4" }}
"""

_MARKET_LIB = """\
use star_frame::prelude::*;

use instructions::{{CancelOrders, Initialize, PlaceOrder}};
mod instructions;
pub mod state;

#[derive(StarFrameProgram)]
#[program(
    instruction_set = MarketplaceInstructionSet,
    id = "{program_id}"
)]
pub struct Marketplace;

#[derive(InstructionSet)]
pub enum MarketplaceInstructionSet {{
    Initialize(Initialize),
    PlaceOrder(PlaceOrder),
    CancelOrders(CancelOrders),
}}
"""

_MARKET_STATE = """\
use star_frame::prelude::*;

#[derive(Align1, Pod, Zeroable, Default, Copy, Clone, Debug, Eq, PartialEq, Ord, PartialOrd, TypeToIdl)]
#[repr(C, packed)]
pub struct Price(pub u64);

#[derive(Align1, Pod, Zeroable, Default, Copy, Clone, Debug, Eq, PartialEq, Ord, PartialOrd, TypeToIdl)]
#[repr(C, packed)]
pub struct Quantity(pub u64);

#[derive(BorshSerialize, BorshDeserialize, Copy, Clone, Debug, Eq, PartialEq, TypeToIdl)]
pub enum OrderSide {{
    Bid,
    Ask,
}}

#[derive(Align1, Pod, Zeroable, Default, Copy, Clone, Debug, Eq, PartialEq, ProgramAccount)]
#[repr(C, packed)]
pub struct MarketAccount {{
    pub version: u8,
    pub authority: Pubkey,
    pub currency: Pubkey,
    pub market_token: Pubkey,
    pub bump: u8,
}}
"""

_MARKET_INSTRUCTIONS = """\
mod cancel_orders;
mod initialize;
mod place_order;

pub use cancel_orders::*;
pub use initialize::*;
pub use place_order::*;
"""

_MARKET_INITIALIZE = """\
use crate::state::MarketAccount;
use star_frame::{{empty_star_frame_instruction, prelude::*}};

#[derive(BorshSerialize, BorshDeserialize, Debug, InstructionArgs)]
pub struct Initialize;

#[derive(AccountSet, Debug)]
pub struct InitializeAccounts {{
    #[validate(funder)]
    pub authority: Signer<Mut<SystemAccount>>,
    #[validate(arg = Create(()))]
    pub market: Init<Signer<Account<MarketAccount>>>,
    pub system_program: Program<System>,
}}
empty_star_frame_instruction!(Initialize, InitializeAccounts);
"""

_MARKET_PLACE_ORDER = """\
use crate::state::{{MarketAccount, OrderSide, Price, Quantity}};
use star_frame::{{empty_star_frame_instruction, prelude::*}};

#[derive(BorshSerialize, BorshDeserialize, Debug, Copy, Clone, InstructionArgs)]
pub struct PlaceOrder {{
    pub side: OrderSide,
    pub price: Price,
    pub quantity: Quantity,
}}

#[derive(AccountSet, Debug)]
pub struct PlaceOrderAccounts {{
    pub maker: Signer<SystemAccount>,
    pub market: Mut<Account<MarketAccount>>,
}}
empty_star_frame_instruction!(PlaceOrder, PlaceOrderAccounts);
"""

_MARKET_CANCEL_ORDERS = """\
use crate::state::MarketAccount;
use star_frame::{{empty_star_frame_instruction, prelude::*}};

#[derive(BorshSerialize, BorshDeserialize, Debug, InstructionArgs)]
pub struct CancelOrders;

#[derive(AccountSet, Debug)]
pub struct CancelOrdersAccounts {{
    pub maker: Signer<SystemAccount>,
    pub market: Mut<Account<MarketAccount>>,
}}
empty_star_frame_instruction!(CancelOrders, CancelOrdersAccounts);
"""

_MARKET_TESTS = """\
use {snake_name}::*;

#[cfg(test)]
mod tests {{
    use super::*;

    #[test]
    fn test_market_initialization() {{
        println!("Marketplace initialization test");
    }}

    #[test]
    fn test_place_and_cancel_order() {{
        println!("Marketplace order test");
    }}
}}
"""

_MARKET_README = """\
# {project_name} - Star Frame Marketplace

An order book marketplace built with Star Frame: create a market for an SPL
token pair, place bids and asks, and cancel open orders.

Instruction handlers live in `src/instructions/` (`initialize.rs`,
`place_order.rs`, `cancel_orders.rs`); shared types in `src/state.rs`.

## Program ID

```
{program_id}
```
"""


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


@dataclass
class ProjectTemplate:
    """A named set of files for ``starpin init``."""

    name: str
    description: str
    files: dict[str, str] = field(default_factory=dict)


TEMPLATES: dict[str, ProjectTemplate] = {
    "counter": ProjectTemplate(
        name="counter",
        description="Counter with owner/signer roles, counting and close",
        files={
            "Cargo.toml": _COUNTER_CARGO,
            "src/lib.rs": _COUNTER_LIB,
            "tests/{snake_name}.rs": _COUNTER_TESTS,
            "README.md": _COUNTER_README,
        },
    ),
    "simple_counter": ProjectTemplate(
        name="simple_counter",
        description="Minimal counter with initialize and increment",
        files={
            "Cargo.toml": _SIMPLE_CARGO,
            "src/lib.rs": _SIMPLE_LIB,
            "tests/{snake_name}.rs": _SIMPLE_TESTS,
            "README.md": _SIMPLE_README,
        },
    ),
    "marketplace": ProjectTemplate(
        name="marketplace",
        description="Order book marketplace over an SPL token pair",
        files={
            "Cargo.toml": _MARKET_CARGO,
            "src/lib.rs": _MARKET_LIB,
            "src/state.rs": _MARKET_STATE,
            "src/instructions/mod.rs": _MARKET_INSTRUCTIONS,
            "src/instructions/initialize.rs": _MARKET_INITIALIZE,
            "src/instructions/place_order.rs": _MARKET_PLACE_ORDER,
            "src/instructions/cancel_orders.rs": _MARKET_CANCEL_ORDERS,
            "tests/{snake_name}.rs": _MARKET_TESTS,
            "README.md": _MARKET_README,
        },
    ),
}

TEMPLATE_ALIASES = {"simple-counter": "simple_counter"}


def get_template(name: str) -> ProjectTemplate | None:
    return TEMPLATES.get(TEMPLATE_ALIASES.get(name, name))
