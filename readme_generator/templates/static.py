"""In-memory include and badge sets.

These are registered after the built-in include directory, so a key here
replaces a file-based include of the same name.
"""

from __future__ import annotations

INCLUDES: dict[str, str] = {
    "install-npm": (
        "Install with [npm](https://www.npmjs.com/):\n"
        "\n"
        "```sh\n"
        "$ npm install --save {{ name }}\n"
        "```\n"
    ),
    "install-global": (
        "Install globally with [npm](https://www.npmjs.com/):\n"
        "\n"
        "```sh\n"
        "$ npm install --global {{ name }}\n"
        "```\n"
    ),
    "install-bower": (
        "Install with [bower](https://bower.io/):\n"
        "\n"
        "```sh\n"
        "$ bower install {{ name }} --save\n"
        "```\n"
    ),
    "running-tests": (
        "Install dev dependencies and run the tests:\n"
        "\n"
        "```sh\n"
        "$ npm install && npm test\n"
        "```\n"
    ),
    "build-docs": (
        "_(This project's readme.md is generated by [verb](https://github.com/verbose/verb), "
        "please don't edit the readme directly. Any changes to the readme must be made in "
        "the [.verb.md](.verb.md) readme template.)_\n"
    ),
    "generate-getting-started": (
        "New to generate? See the [getting started guide]"
        "({{ links.generate.getting_started }}).\n"
    ),
}

BADGES: dict[str, str] = {
    "npm": (
        "[![NPM version](https://img.shields.io/npm/v/{{ name }}.svg?style=flat)]"
        "(https://www.npmjs.com/package/{{ name }})"
    ),
    "downloads": (
        "[![NPM monthly downloads](https://img.shields.io/npm/dm/{{ name }}.svg?style=flat)]"
        "(https://npmjs.org/package/{{ name }})"
    ),
    "travis": (
        "[![Build Status](https://img.shields.io/travis/{{ repo }}.svg?style=flat)]"
        "(https://travis-ci.org/{{ repo }})"
    ),
    "appveyor": (
        "[![Windows Build Status](https://img.shields.io/appveyor/ci/{{ repo }}.svg?style=flat)]"
        "(https://ci.appveyor.com/project/{{ repo }})"
    ),
    "license": (
        "[![License](https://img.shields.io/npm/l/{{ name }}.svg?style=flat)]"
        "(https://www.npmjs.com/package/{{ name }})"
    ),
}
