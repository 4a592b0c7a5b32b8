import os

from setuptools import find_packages, setup

README = os.path.join(os.path.dirname(__file__), "README.md")


def readme() -> str:
    with open(README, encoding="utf-8") as f:
        return f.read()


setup(
    name="moleculer_call_wrapper",
    version="1.0.0",
    description="Generate a typed TypeScript call wrapper for Moleculer service actions",
    long_description=readme(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Code Generators",
        "Intended Audience :: Developers",
    ],
    keywords="moleculer typescript microservices code generation tree-sitter template",
    license="MIT",
    packages=find_packages(),
    python_requires=">=3.11",
    install_requires=[
        "click>=8.0.0",
        "jinja2>=3.0.0",
        "tree-sitter>=0.23.0",
        "tree-sitter-typescript>=0.23.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "moleculer-call-wrapper=moleculer_call_wrapper.moleculer_call_wrapper:moleculer_call_wrapper",
        ],
    },
    include_package_data=True,
    package_data={
        "moleculer_call_wrapper": ["templates/**/*.jinja2"],
    },
    zip_safe=False,
)
