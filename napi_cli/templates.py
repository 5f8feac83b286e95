"""File templates used by `napi new`."""
from __future__ import annotations

from typing import Dict


CARGO_TOML = """\
[package]
edition = "2021"
name = "{{crate.name}}"
version = "0.0.0"

[lib]
crate-type = ["cdylib"]

[dependencies]
napi = { version = "2", default-features = false, features = [{{crate.napi_features}}] }
napi-derive = {{crate.napi_derive}}

[build-dependencies]
napi-build = "2"

[profile.release]
lto = true
"""

BUILD_RS = """\
extern crate napi_build;

fn main() {
  napi_build::setup();
}
"""

LIB_RS = """\
#![deny(clippy::all)]

#[macro_use]
extern crate napi_derive;

#[napi]
pub fn sum(a: i32, b: i32) -> i32 {
  a + b
}
"""

GITIGNORE = """\
target/
node_modules/
*.node
index.d.ts
.DS_Store
"""

NPMIGNORE = """\
target
Cargo.lock
.cargo
.github
npm
.eslintrc
.prettierignore
rustfmt.toml
yarn.lock
*.node
"""

RUSTFMT_TOML = """\
tab_spaces = 2
edition = "2021"
"""

STATIC_FILES: Dict[str, str] = {
    "build.rs": BUILD_RS,
    "src/lib.rs": LIB_RS,
    ".gitignore": GITIGNORE,
    ".npmignore": NPMIGNORE,
    "rustfmt.toml": RUSTFMT_TOML,
}
