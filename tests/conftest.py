"""
Shared fixtures: small Composer and npm projects laid out on disk.
"""

import json
from pathlib import Path

import pytest

from lockgraph.config import reset_config_manager
from lockgraph.licenses import FileLicenseScanner

MIT_TEXT = """The MIT License (MIT)

{copyright}

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in
all copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND.
"""

BCRYPT_SHA1 = "mrVie5PmBiH/fNrF2pczAn3x0Ms="
BODY_PARSER_SHA512 = (
    "dhEPs72UPbDnAQJ9ZKMNTP6ptJaionhP5cBb541nXPlW60Jepo9RV/a4fX4XWW9CuFNK22krhrj1+rgzifNCsw=="
)
VALIDATOR_SHA512 = (
    "X/p3UZerAIsbBfN/IwahhYaBbY68EN/UQBWHtsbXGT5bfrH/p4NQzUCG1kF/rtKaNpnJ7jAu6NGTdSNtyNIXMw=="
)
BAR_SHASUM = "da39a3ee5e6b4b0d3255bfef95601890afd80709"


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


def write_mit_license(directory: Path, copyright_line: str) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "LICENSE").write_text(MIT_TEXT.format(copyright=copyright_line), encoding="utf-8")


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch):
    for var in ("LOCKGRAPH_ECOSYSTEMS", "LOCKGRAPH_INCLUDE_DEV", "LOCKGRAPH_LICENSE_DETECTION",
                "LOCKGRAPH_COMPOSER_HOST", "LOCKGRAPH_NPM_REGISTRY", "LOG_LEVEL", "LOG_FILE",
                "LOG_FORMAT", "LOG_MAX_SIZE", "LOG_BACKUP_COUNT", "LOG_STRUCTURED"):
        monkeypatch.delenv(var, raising=False)
    reset_config_manager()
    yield
    reset_config_manager()


@pytest.fixture
def scanner():
    return FileLicenseScanner()


@pytest.fixture
def composer_project(tmp_path: Path) -> Path:
    project = tmp_path / "shop"
    write_json(project / "composer.json", {
        "name": "acme/shop",
        "version": "v1.4.0",
        "type": "project",
        "authors": [
            {"name": "Jane Doe", "email": "jane@example.com"},
            {"name": "John Roe", "email": "john@example.com"},
        ],
        "require": {"php": ">=7.4", "vendor/foo": "^2.1", "acme/bar": "^1.0"},
    })
    write_json(project / "composer.lock", {
        "_readme": ["This file locks the dependencies of your project to a known state"],
        "content-hash": "0f1e2d3c",
        "packages": [
            {
                "name": "vendor/foo",
                "version": "v2.1.0",
                "type": "library",
                "dist": {"type": "zip", "url": "https://example.com/foo.git", "reference": "abc", "shasum": ""},
                "source": {"type": "git", "url": "https://github.com/vendor/foo.git", "reference": "abc"},
                "require": {"php": ">=7.4", "ext-json": "*", "acme/bar": "^1.0"},
                "license": ["MIT"],
                "authors": [{"name": "Foo Author", "email": "foo@example.com"}],
            },
            {
                "name": "acme/bar",
                "version": "1.0.3",
                "type": "library",
                "dist": {
                    "type": "zip",
                    "url": "https://api.github.com/repos/acme/bar/zipball/def",
                    "reference": "def",
                    "shasum": BAR_SHASUM,
                },
                "require": {"vendor/foo": "^2.0"},
                "license": "BSD-3-Clause",
            },
        ],
        "packages-dev": [
            {
                "name": "phpunit/phpunit",
                "version": "9.5.0",
                "type": "library",
                "require": {"php": ">=7.3"},
            },
        ],
    })
    write_mit_license(project / "vendor" / "vendor" / "foo", "Copyright (c) 2020 Foo Author <foo@example.com>")
    (project / "vendor" / "acme" / "bar").mkdir(parents=True)
    return project


@pytest.fixture
def npm_project(tmp_path: Path) -> Path:
    """npm project with a v3 lock file, a nested install and a dev dependency."""
    project = tmp_path / "e-commerce"
    manifest = {
        "name": "e-commerce",
        "version": "1.0.0",
        "author": "ahmed saber <ahmed@example.com> (https://example.com)",
        "dependencies": {"bcryptjs": "^2.4.3", "body-parser": "^1.18.3"},
        "devDependencies": {"validator": "^10.7.1"},
    }
    write_json(project / "package.json", manifest)
    write_json(project / "package-lock.json", {
        "name": "e-commerce",
        "version": "1.0.0",
        "lockfileVersion": 3,
        "requires": True,
        "packages": {
            "": {
                "name": "e-commerce",
                "version": "1.0.0",
                "dependencies": manifest["dependencies"],
                "devDependencies": manifest["devDependencies"],
            },
            "node_modules/bcryptjs": {
                "version": "2.4.3",
                "resolved": "https://registry.npmjs.org/bcryptjs/-/bcryptjs-2.4.3.tgz",
                "integrity": f"sha1-{BCRYPT_SHA1}",
            },
            "node_modules/body-parser": {
                "version": "1.19.0",
                "resolved": "https://registry.npmjs.org/body-parser/-/body-parser-1.19.0.tgz",
                "integrity": f"sha512-{BODY_PARSER_SHA512}",
                "dependencies": {"bytes": "3.1.0", "debug": "2.6.9"},
            },
            "node_modules/bytes": {
                "version": "3.1.0",
            },
            "node_modules/debug": {
                "version": "2.6.9",
                "resolved": "https://registry.npmjs.org/debug/-/debug-2.6.9.tgz",
                "dependencies": {"ms": "2.0.0"},
            },
            "node_modules/debug/node_modules/ms": {
                "version": "2.0.0",
                "resolved": "https://registry.npmjs.org/ms/-/ms-2.0.0.tgz",
            },
            "node_modules/ms": {
                "version": "2.1.3",
                "resolved": "https://registry.npmjs.org/ms/-/ms-2.1.3.tgz",
            },
            "node_modules/validator": {
                "version": "10.11.0",
                "resolved": "https://registry.npmjs.org/validator/-/validator-10.11.0.tgz",
                "integrity": f"sha512-{VALIDATOR_SHA512}",
                "dev": True,
            },
        },
    })
    bcrypt_dir = project / "node_modules" / "bcryptjs"
    write_mit_license(bcrypt_dir, "Copyright (c) 2012 Nevins Bartolomeo <nevins.bartolomeo@gmail.com>")
    write_json(bcrypt_dir / "package.json", {
        "name": "bcryptjs",
        "version": "2.4.3",
        "author": {"name": "Daniel Wirtz", "email": "dcode@dcode.io"},
    })
    for name in ("body-parser", "bytes", "debug", "ms", "validator"):
        (project / "node_modules" / name).mkdir(parents=True, exist_ok=True)
    return project


@pytest.fixture
def npm_cycle_project(tmp_path: Path) -> Path:
    """Two packages that depend on each other, one also nested with an older copy."""
    project = tmp_path / "cycle"
    write_json(project / "package.json", {
        "name": "cycle",
        "version": "0.0.1",
        "dependencies": {"alpha": "^1.0.0"},
    })
    write_json(project / "package-lock.json", {
        "lockfileVersion": 2,
        "packages": {
            "": {"name": "cycle", "version": "0.0.1", "dependencies": {"alpha": "^1.0.0"}},
            "node_modules/alpha": {"version": "1.0.0", "dependencies": {"beta": "^2.0.0"}},
            "node_modules/beta": {"version": "2.0.0", "dependencies": {"alpha": "^0.9.0"}},
            "node_modules/beta/node_modules/alpha": {"version": "0.9.0", "dependencies": {"beta": "^2.0.0"}},
        },
    })
    (project / "node_modules" / "alpha").mkdir(parents=True)
    return project


@pytest.fixture
def npm_v1_project(tmp_path: Path) -> Path:
    project = tmp_path / "legacy"
    write_json(project / "package.json", {
        "name": "@acme/legacy",
        "version": "v0.3.0",
        "contributors": [{"name": "Pat Lee", "email": "pat@example.com"}],
        "dependencies": {"express": "^4.17.1"},
        "devDependencies": {"@types/node": "^14.0.0"},
    })
    write_json(project / "package-lock.json", {
        "name": "@acme/legacy",
        "version": "0.3.0",
        "lockfileVersion": 1,
        "requires": True,
        "dependencies": {
            "@types/node": {
                "version": "14.14.0",
                "resolved": "https://registry.npmjs.org/@types/node/-/node-14.14.0.tgz",
                "dev": True,
            },
            "express": {
                "version": "4.17.1",
                "resolved": "https://registry.npmjs.org/express/-/express-4.17.1.tgz",
                "requires": {"cookie": "0.4.0", "qs": "6.7.0"},
                "dependencies": {
                    "qs": {
                        "version": "6.7.0",
                        "resolved": "https://registry.npmjs.org/qs/-/qs-6.7.0.tgz",
                    },
                },
            },
            "cookie": {"version": "0.4.0"},
            "qs": {"version": "6.9.4"},
        },
    })
    (project / "node_modules" / "express").mkdir(parents=True)
    return project
