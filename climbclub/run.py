from dotenv import load_dotenv

# Config reads the environment at import time
load_dotenv()

from climbclub import create_app

api = create_app()

if __name__ == "__main__":
    api.run(debug=True, threaded=True)
