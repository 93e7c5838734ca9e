from setuptools import setup

setup(
    name="automaton-studio",
    version="0.1.0",
    description="Build and run DFA/NFA automata through a small preprocessed command language.",
    packages=["automaton_studio"],
    py_modules=["main"],
    python_requires=">=3.8",
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["automaton-studio=main:main"]},
)
