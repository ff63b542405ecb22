import setuptools

setuptools.setup(
    name="mtg_thumbnail_tools",
    version="0.1",
    author="yochi",
    author_email="pedrogush@gmail.com",
    description="MTG Matchup Thumbnails: compose 2x2 card-art thumbnails for videos and streams",
    packages=[
        "controllers",
        "navigators",
        "repositories",
        "services",
        "utils",
        "widgets",
        "widgets.dialogs",
    ],
    py_modules=["main"],
    package_data={"utils": ["assets/*.png"]},
    classifiers=["Programming Language :: Python :: 3", "Operating System :: OS Independent"],
    python_requires=">=3.11",
    install_requires=[
        "loguru",
        "pillow>=10.1",  # ImageFont.load_default(size=...)
        "requests",  # Scryfall API and image downloads
    ],
    extras_require={
        "ui": ["wxPython"],
        "test": ["pytest"],
    },
    entry_points={"gui_scripts": ["mtg-thumbnails=main:main"]},
)
