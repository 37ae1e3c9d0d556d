from note_taking_app.server import run

if __name__ == "__main__":
    run()
