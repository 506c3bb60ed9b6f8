#!/usr/bin/env python
#

from setuptools import setup

from bodystructure import __version__

setup(
    name="imap-bodystructure",
    version=__version__,
    description="Parse IMAP BODYSTRUCTURE and ENVELOPE responses",
    long_description=(
        "bodystructure parses the BODYSTRUCTURE and ENVELOPE responses of "
        "an IMAP server in to a tree of message parts that can be walked "
        "and addressed by part path."
    ),
    author="Scanner",
    author_email="scanner@apricot.com",
    packages=["bodystructure", "bodystructure.test"],
    python_requires=">=3.11",
    install_requires=["docopt", "python-dotenv", "rich"],
    extras_require={"test": ["pytest", "factory_boy", "Faker"]},
    entry_points={
        "console_scripts": ["imapbs=bodystructure.imapbs:main"],
    },
)
