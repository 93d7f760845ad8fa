"""
This module contains the install, build and collect steps of monobuild.

It's separated into the following parts:

- project.py: configured projects and their paths
- installer.py: clean installation of the dependencies of all projects
- builder.py: build a single project
- collector.py: copy the build output of all projects into one directory
- pipeline.py: facade that runs all of the above
- errors.py: errors that abort a step
"""
