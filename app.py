from study_companion import create_app
from study_companion.runtime import get_runtime

app = create_app()

if __name__ == '__main__':
    config = get_runtime(app).config
    app.run(host='0.0.0.0', debug=config.is_dev_like, port=config.port)
