# VisiHub Verify - Action Package
#
# This package contains the staged pipeline that publishes a CSV/TSV file
# as a new revision of a VisiHub dataset and reports the server-side
# integrity check back to GitHub Actions. Each stage is in its own file
# following the one-function-per-file architecture pattern.
#
# The pipeline is orchestrated by verify_pipeline_main.py and runs inside
# a GitHub Actions runner. It reads its inputs from environment variables
# set by action.yml, calls the VisiHub REST API, and writes back to the
# runner (outputs file, job summary, annotations).
#
# Stage flow:
#   1. Validate Inputs -> 2. Compute Content Hash -> 3. Resolve Dataset
#   -> 4. Create & Upload Revision -> 5. Wait For Check
#   -> 6. Report Results

__version__ = "1.0.0"
