"""gitwrapper lives at <https://github.com/gitwrapper/gitwrapper>.

gitwrapper
----------

Typed, event-instrumented Python API for the git binary.

"""
from setuptools import find_packages, setup

about = {}
with open("src/gitwrapper/__about__.py", encoding="utf-8") as fp:
    exec(fp.read(), about)

with open("requirements/test.txt", encoding="utf-8") as f:
    tests_reqs = [line for line in f.read().split("\n") if line]

readme = open("README.md", encoding="utf-8").read()

history = open("CHANGES", encoding="utf-8").read().replace(".. :changelog:", "")


setup(
    name=about["__title__"],
    version=about["__version__"],
    url=about["__github__"],
    download_url=about["__pypi__"],
    project_urls={
        "Documentation": about["__docs__"],
        "Code": about["__github__"],
        "Issue tracker": about["__tracker__"],
    },
    license=about["__license__"],
    author=about["__author__"],
    author_email=about["__email__"],
    description=about["__description__"],
    long_description=readme,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages("src"),
    package_data={"gitwrapper": ["bin/*.sh", "py.typed"]},
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=["typing-extensions"],
    extras_require={"test": tests_reqs},
    entry_points={"pytest11": ["gitwrapper = gitwrapper.pytest_plugin"]},
    zip_safe=False,
    keywords=about["__title__"],
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX",
        "Operating System :: MacOS :: MacOS X",
        "Framework :: Pytest",
        "Intended Audience :: Developers",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Software Development :: Version Control :: Git",
        "Topic :: Utilities",
    ],
)
