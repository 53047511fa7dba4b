from depgraphml.cli import app

def main():
    """ Entrypoint when is installed via pip """
    app(prog_name="depgraphml")

# Development mode
if __name__ == "__main__":
    main()
